"""Custom exceptions for the compliance engine."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ComplianceEngineError(Exception):
    """
    Base exception for compliance engine errors.

    Attributes:
        message: Human-readable error description.
        details: Additional error details for callers that surface the error.
    """
    message: str
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(str(self))

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class RuleValidationError(ComplianceEngineError):
    """
    Raised when a rule definition cannot be loaded into a corpus.

    Covers unparsable patterns, weights outside [0, 1], duplicate ids
    and missing identifiers.
    """
    rule_id: Optional[str] = None

    def __str__(self) -> str:
        if self.rule_id:
            return f"{self.message} | Rule: {self.rule_id}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["rule_id"] = self.rule_id
        return data


@dataclass
class ThresholdConfigurationError(ComplianceEngineError):
    """Raised when risk thresholds are not strictly descending within [0, 100]."""


@dataclass
class RuleNotFoundError(ComplianceEngineError, LookupError):
    """Raised when a rule id is not registered in the corpus."""
    rule_id: str = ""


@dataclass
class LibraryNotFoundError(ComplianceEngineError, LookupError):
    """Raised when a clause library id is unknown."""
    library_id: str = ""


@dataclass
class TemplateNotFoundError(ComplianceEngineError, LookupError):
    """Raised when a clause template id is unknown."""
    template_id: str = ""
