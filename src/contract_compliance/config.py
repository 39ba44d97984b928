"""
Configuration management for the compliance engine.

Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # Compliance Analysis
    # ==========================================================================
    default_jurisdiction: str = "US"
    missing_rule_weight_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0,
        description="Rules weighted above this are required when absent",
    )
    implementation_quality_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0,
        description="Matched rules below this quality are flagged",
    )
    custom_rules_path: Path | None = Field(
        default=None, description="JSON file with custom rule definitions"
    )

    # Risk classification cutoffs (minimum score for each level)
    risk_threshold_low: float = 90.0
    risk_threshold_medium: float = 70.0
    risk_threshold_high: float = 50.0

    # ==========================================================================
    # Clause Library
    # ==========================================================================
    similarity_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    template_suggestion_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    default_max_suggestions: int = Field(default=5, ge=1)
    seed_default_library: bool = True

    @field_validator("custom_rules_path", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v in (None, ""):
            return None
        return Path(v) if isinstance(v, str) else v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
