"""
Compliance models: rules, violations, scores and analysis results.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class Framework(str, Enum):
    """Regulatory frameworks with built-in support."""

    GDPR = "GDPR"
    HIPAA = "HIPAA"
    SOX = "SOX"
    CCPA = "CCPA"
    PIPEDA = "PIPEDA"
    LGPD = "LGPD"
    ISO27001 = "ISO27001"
    SOC2 = "SOC2"
    PCI_DSS = "PCI-DSS"
    CUSTOM = "CUSTOM"


class RiskLevel(str, Enum):
    """Ordinal risk classification derived from a compliance score."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Ordinal position, LOW = 0 through CRITICAL = 3."""
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class ClauseCategory(str, Enum):
    """Clause categories shared by compliance rules and clause templates."""

    DATA_PROTECTION = "DATA_PROTECTION"
    FINANCIAL_REPORTING = "FINANCIAL_REPORTING"
    HEALTHCARE_PRIVACY = "HEALTHCARE_PRIVACY"
    CONSUMER_RIGHTS = "CONSUMER_RIGHTS"
    SECURITY_REQUIREMENTS = "SECURITY_REQUIREMENTS"
    AUDIT_COMPLIANCE = "AUDIT_COMPLIANCE"
    TERMINATION_RIGHTS = "TERMINATION_RIGHTS"
    LIABILITY_LIMITATION = "LIABILITY_LIMITATION"
    INTELLECTUAL_PROPERTY = "INTELLECTUAL_PROPERTY"
    CONFIDENTIALITY = "CONFIDENTIALITY"
    DATA_RETENTION = "DATA_RETENTION"
    CROSS_BORDER_TRANSFER = "CROSS_BORDER_TRANSFER"
    CONSENT_MANAGEMENT = "CONSENT_MANAGEMENT"
    BREACH_NOTIFICATION = "BREACH_NOTIFICATION"
    THIRD_PARTY_SHARING = "THIRD_PARTY_SHARING"
    PAYMENT_TERMS = "PAYMENT_TERMS"
    SERVICE_LEVEL_AGREEMENTS = "SERVICE_LEVEL_AGREEMENTS"
    FORCE_MAJEURE = "FORCE_MAJEURE"
    GOVERNING_LAW = "GOVERNING_LAW"
    DISPUTE_RESOLUTION = "DISPUTE_RESOLUTION"
    INDEMNIFICATION = "INDEMNIFICATION"
    WARRANTIES = "WARRANTIES"
    REPRESENTATIONS = "REPRESENTATIONS"
    COVENANTS = "COVENANTS"
    CONDITIONS_PRECEDENT = "CONDITIONS_PRECEDENT"
    REMEDIES = "REMEDIES"
    LIMITATION_OF_LIABILITY = "LIMITATION_OF_LIABILITY"
    TERMINATION = "TERMINATION"
    SURVIVAL = "SURVIVAL"
    ASSIGNMENT = "ASSIGNMENT"
    AMENDMENT = "AMENDMENT"
    SEVERABILITY = "SEVERABILITY"
    ENTIRE_AGREEMENT = "ENTIRE_AGREEMENT"
    NOTICES = "NOTICES"
    COUNTERPARTS = "COUNTERPARTS"
    CUSTOM = "CUSTOM"

    @property
    def tag(self) -> str:
        """Lowercase, hyphenated form used for auto-tagging."""
        return self.value.lower().replace("_", "-")

    @property
    def label(self) -> str:
        """Lowercase, space separated form used in recommendations."""
        return self.value.lower().replace("_", " ")


def _enum_value(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


class ComplianceRule(BaseModel):
    """
    A single compliance requirement.

    Rules are immutable once loaded. Patterns are stored as regular
    expression source strings and validated on construction so that a
    malformed corpus fails at load time rather than during analysis.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable rule identifier")
    framework: str = Field(..., min_length=1, description="Regulatory framework")
    category: ClauseCategory
    name: str
    description: str
    risk_level: RiskLevel
    keywords: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()
    weight: float = Field(..., ge=0.0, le=1.0, description="How load-bearing the rule is")
    is_active: bool = True
    jurisdiction: str | None = None
    client_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("framework", mode="before")
    @classmethod
    def normalize_framework(cls, v: Any) -> Any:
        """Accept Framework members as well as plain strings."""
        return _enum_value(v)

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject patterns that do not compile."""
        for pattern in v:
            try:
                re.compile(pattern, re.IGNORECASE)
            except re.error as e:
                raise ValueError(f"invalid pattern {pattern!r}: {e}") from e
        return v

    def applies_to(self, framework: str, jurisdiction: str | None, client_id: str | None) -> bool:
        """Check whether this rule is in scope for an analysis request."""
        return (
            self.framework == framework
            and self.is_active
            and (self.jurisdiction is None or self.jurisdiction == jurisdiction)
            and (self.client_id is None or self.client_id == client_id)
        )


class ViolationKind(str, Enum):
    """Where a violation was detected in the absence of clause tracking."""

    MISSING = "missing"
    IMPLEMENTATION = "implementation"


class ComplianceViolation(BaseModel):
    """A detected compliance gap for a single rule."""

    id: str
    rule_id: str
    rule: ComplianceRule
    clause_id: ViolationKind
    severity: RiskLevel
    description: str
    explanation: str
    suggested_action: str
    detected_at: datetime = Field(default_factory=utcnow)
    is_resolved: bool = False
    resolved_at: datetime | None = None
    resolved_by: str | None = None

    @property
    def category(self) -> ClauseCategory:
        return self.rule.category

    @property
    def framework(self) -> str:
        return self.rule.framework

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "rule_id": self.rule_id,
            "framework": self.framework,
            "category": self.category.value,
            "clause_id": self.clause_id.value,
            "severity": self.severity.value,
            "description": self.description,
            "explanation": self.explanation,
            "suggested_action": self.suggested_action,
            "detected_at": self.detected_at.isoformat(),
            "is_resolved": self.is_resolved,
        }


class ComplianceScore(BaseModel):
    """Score and findings for one framework."""

    framework: str
    overall_score: float = Field(..., ge=0.0, le=100.0)
    risk_level: RiskLevel
    violations: list[ComplianceViolation] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "overall_score": self.overall_score,
            "risk_level": self.risk_level.value,
            "violations": [v.to_dict() for v in self.violations],
            "recommendations": list(self.recommendations),
            "last_updated": self.last_updated.isoformat(),
        }


class ContractComplianceAnalysis(BaseModel):
    """
    Top-level analysis result across all requested frameworks.

    Issue buckets do not map one-to-one onto severities: critical_issues
    holds CRITICAL violations, medium_issues holds HIGH violations and
    low_issues holds MEDIUM and LOW violations.
    """

    contract_id: str
    document_name: str
    frameworks: list[ComplianceScore] = Field(default_factory=list)
    overall_risk_level: RiskLevel
    overall_compliance_score: float = Field(..., ge=0.0, le=100.0)
    critical_issues: list[ComplianceViolation] = Field(default_factory=list)
    medium_issues: list[ComplianceViolation] = Field(default_factory=list)
    low_issues: list[ComplianceViolation] = Field(default_factory=list)
    auto_tags: list[str] = Field(default_factory=list)
    jurisdiction: str
    client_id: str | None = None
    analyzed_at: datetime = Field(default_factory=utcnow)

    @field_validator("auto_tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Keep first occurrence of each tag."""
        return list(dict.fromkeys(v))

    @property
    def violations(self) -> list[ComplianceViolation]:
        """All violations across frameworks."""
        return [v for score in self.frameworks for v in score.violations]

    def score_for(self, framework: str) -> ComplianceScore | None:
        framework = _enum_value(framework)
        for score in self.frameworks:
            if score.framework == framework:
                return score
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "contract_id": self.contract_id,
            "document_name": self.document_name,
            "frameworks": [s.to_dict() for s in self.frameworks],
            "overall_risk_level": self.overall_risk_level.value,
            "overall_compliance_score": self.overall_compliance_score,
            "critical_issues": [v.to_dict() for v in self.critical_issues],
            "medium_issues": [v.to_dict() for v in self.medium_issues],
            "low_issues": [v.to_dict() for v in self.low_issues],
            "auto_tags": list(self.auto_tags),
            "jurisdiction": self.jurisdiction,
            "client_id": self.client_id,
            "analyzed_at": self.analyzed_at.isoformat(),
        }


class RiskThresholds(BaseModel):
    """
    Minimum score for each risk level.

    A score at or above ``low`` is LOW, at or above ``medium`` is MEDIUM,
    at or above ``high`` is HIGH, anything below is CRITICAL. ``critical``
    is informational (the floor shown to users).
    """

    model_config = ConfigDict(frozen=True)

    low: float = 90.0
    medium: float = 70.0
    high: float = 50.0
    critical: float = 0.0

    @model_validator(mode="after")
    def check_order(self) -> "RiskThresholds":
        values = (self.low, self.medium, self.high, self.critical)
        if any(v < 0 or v > 100 for v in values):
            raise ValueError("risk thresholds must lie within [0, 100]")
        if not (self.low > self.medium > self.high >= self.critical):
            raise ValueError("risk thresholds must be strictly descending from LOW to HIGH")
        return self

    @classmethod
    def from_mapping(cls, mapping: dict[str, float]) -> "RiskThresholds":
        """Build thresholds from a {"LOW": 80, "MEDIUM": 60, ...} mapping."""
        return cls(**{str(_enum_value(k)).lower(): v for k, v in mapping.items()})


class NotificationSettings(BaseModel):
    """Notification channels for an organisation (stored, not acted upon)."""

    email: bool = True
    slack: bool = False
    webhook: str | None = None


class ComplianceConfiguration(BaseModel):
    """Per-organisation compliance configuration supplied by the caller."""

    id: str
    client_id: str | None = None
    jurisdiction: str = "US"
    frameworks: list[str] = Field(default_factory=list)
    custom_rules: list[ComplianceRule] = Field(default_factory=list)
    # None classifies with the analyzer's settings
    risk_thresholds: RiskThresholds | None = None
    auto_tagging_enabled: bool = True
    notification_settings: NotificationSettings = Field(default_factory=NotificationSettings)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("frameworks", mode="before")
    @classmethod
    def normalize_frameworks(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [_enum_value(f) for f in v]
        return v
