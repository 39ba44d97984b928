"""
Clause library models: templates, libraries, suggestions and usage.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from contract_compliance.models.compliance import ClauseCategory, RiskLevel, utcnow


def new_id(prefix: str) -> str:
    """Generate a prefixed unique identifier."""
    return f"{prefix}_{uuid4().hex[:12]}"


class ClauseStatus(str, Enum):
    """Lifecycle status of a clause template."""

    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    DEPRECATED = "DEPRECATED"
    ARCHIVED = "ARCHIVED"


class Complexity(str, Enum):
    SIMPLE = "SIMPLE"
    MODERATE = "MODERATE"
    COMPLEX = "COMPLEX"

    @classmethod
    def from_word_count(cls, word_count: int) -> "Complexity":
        """Classify clause complexity by length."""
        if word_count < 30:
            return cls.SIMPLE
        if word_count < 80:
            return cls.MODERATE
        return cls.COMPLEX


class SuggestionType(str, Enum):
    IMPROVEMENT = "IMPROVEMENT"
    COMPLIANCE = "COMPLIANCE"
    RISK_REDUCTION = "RISK_REDUCTION"
    CLARITY = "CLARITY"
    LEGAL_STRENGTH = "LEGAL_STRENGTH"


class SuggestionSource(str, Enum):
    AI_ANALYSIS = "AI_ANALYSIS"
    LEGAL_PRECEDENT = "LEGAL_PRECEDENT"
    BEST_PRACTICE = "BEST_PRACTICE"
    USER_SUGGESTION = "USER_SUGGESTION"


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DifferenceType(str, Enum):
    ADDITION = "ADDITION"
    DELETION = "DELETION"
    MODIFICATION = "MODIFICATION"
    REORDERING = "REORDERING"


class Impact(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class Recommendation(str, Enum):
    ACCEPT = "ACCEPT"
    MODIFY = "MODIFY"
    REJECT = "REJECT"


class ImprovementGoal(str, Enum):
    """Heuristic rewrite goals a caller can request."""

    CLARITY = "clarity"
    COMPLIANCE = "compliance"
    RISK_REDUCTION = "risk_reduction"


# =============================================================================
# Templates and Libraries
# =============================================================================


class ClauseMetadata(BaseModel):
    """Structured metadata attached to a clause template."""

    word_count: int = Field(default=0, ge=0)
    complexity: Complexity = Complexity.SIMPLE
    legal_precedent: str | None = None
    court_cases: list[str] = Field(default_factory=list)
    regulatory_references: list[str] = Field(default_factory=list)

    @classmethod
    def for_content(cls, content: str, **kwargs: Any) -> "ClauseMetadata":
        """Derive word count and complexity from clause content."""
        word_count = len(content.split())
        return cls(
            word_count=word_count,
            complexity=Complexity.from_word_count(word_count),
            **kwargs,
        )


class ClauseVersion(BaseModel):
    """A previous revision of a clause template."""

    id: str = Field(default_factory=lambda: new_id("version"))
    version: str
    content: str
    changes: str = ""
    author: str
    created_at: datetime = Field(default_factory=utcnow)
    is_active: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    approved_by: str | None = None
    approved_at: datetime | None = None


class ClauseTemplate(BaseModel):
    """A reusable, vetted block of contract language."""

    id: str = Field(default_factory=lambda: new_id("clause"))
    title: str = Field(..., min_length=1)
    description: str = ""
    category: ClauseCategory
    content: str = Field(..., min_length=1)
    alternative_versions: list[ClauseVersion] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status: ClauseStatus = ClauseStatus.DRAFT
    risk_level: RiskLevel = RiskLevel.MEDIUM
    compliance_frameworks: list[str] = Field(default_factory=list)
    jurisdiction: str = "US"
    language: str = "en"
    author: str = "System"
    is_public: bool = False
    firm_id: str | None = None
    client_id: str | None = None
    usage_count: int = Field(default=0, ge=0)
    metadata: ClauseMetadata = Field(default_factory=ClauseMetadata)
    created_at: datetime = Field(default_factory=utcnow)
    last_modified: datetime = Field(default_factory=utcnow)

    @field_validator("compliance_frameworks", mode="before")
    @classmethod
    def normalize_frameworks(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [f.value if isinstance(f, Enum) else f for f in v]
        return v

    @property
    def current_version(self) -> str:
        return f"1.{len(self.alternative_versions)}"

    def searchable_fields(self) -> list[str]:
        """Lowercased text fields consulted by text search."""
        return [
            self.title.lower(),
            self.description.lower(),
            self.content.lower(),
            *(tag.lower() for tag in self.tags),
        ]


class LibrarySettings(BaseModel):
    allow_public_sharing: bool = False
    require_approval: bool = True
    auto_tagging: bool = True
    version_control: bool = True


class ClauseLibrary(BaseModel):
    """A named collection of clause templates owned by a firm."""

    id: str = Field(default_factory=lambda: new_id("library"))
    name: str = Field(..., min_length=1)
    description: str = ""
    firm_id: str
    is_public: bool = False
    categories: list[ClauseCategory] = Field(default_factory=list)
    clauses: list[ClauseTemplate] = Field(default_factory=list)
    settings: LibrarySettings = Field(default_factory=LibrarySettings)
    created_at: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)

    @property
    def owner(self) -> str:
        return self.firm_id

    @property
    def total_clauses(self) -> int:
        return len(self.clauses)

    def find_clause(self, template_id: str) -> ClauseTemplate | None:
        for clause in self.clauses:
            if clause.id == template_id:
                return clause
        return None


class ClauseSearchFilters(BaseModel):
    """Optional, AND-combined filters for clause search."""

    categories: list[ClauseCategory] | None = None
    status: list[ClauseStatus] | None = None
    risk_level: list[RiskLevel] | None = None
    compliance_frameworks: list[str] | None = None
    jurisdiction: str | None = None
    language: str | None = None
    author: str | None = None
    tags: list[str] | None = None
    is_public: bool | None = None
    firm_id: str | None = None
    modified_after: datetime | None = None
    modified_before: datetime | None = None

    def matches(self, clause: ClauseTemplate) -> bool:
        """Check a template against every filter that is set."""
        if self.categories and clause.category not in self.categories:
            return False
        if self.status and clause.status not in self.status:
            return False
        if self.risk_level and clause.risk_level not in self.risk_level:
            return False
        if self.compliance_frameworks and not set(self.compliance_frameworks) & set(
            clause.compliance_frameworks
        ):
            return False
        if self.jurisdiction and clause.jurisdiction != self.jurisdiction:
            return False
        if self.language and clause.language != self.language:
            return False
        if self.author and clause.author != self.author:
            return False
        if self.tags and not set(self.tags) & set(clause.tags):
            return False
        if self.is_public is not None and clause.is_public != self.is_public:
            return False
        if self.firm_id and clause.firm_id != self.firm_id:
            return False
        if self.modified_after and clause.last_modified < self.modified_after:
            return False
        if self.modified_before and clause.last_modified > self.modified_before:
            return False
        return True


# =============================================================================
# Usage and Analytics
# =============================================================================


class ClauseUsage(BaseModel):
    """Append-only record of a template being used in a contract."""

    id: str = Field(default_factory=lambda: new_id("usage"))
    clause_id: str
    contract_id: str
    contract_name: str
    used_at: datetime = Field(default_factory=utcnow)
    used_by: str
    context: str = ""
    modifications: str | None = None
    is_active: bool = True


class PerformanceMetrics(BaseModel):
    active_rate: float = Field(..., ge=0.0, le=1.0)
    modification_rate: float = Field(..., ge=0.0, le=1.0)


class ClauseAnalytics(BaseModel):
    clause_id: str
    total_usage: int
    unique_contracts: int
    last_used: datetime
    most_common_modifications: list[str] = Field(default_factory=list)
    usage_by_category: dict[str, int] = Field(default_factory=dict)
    usage_by_firm: dict[str, int] = Field(default_factory=dict)
    performance_metrics: PerformanceMetrics


# =============================================================================
# Suggestions
# =============================================================================


class SmartSuggestionRequest(BaseModel):
    """Caller request for clause suggestions."""

    original_clause: str = Field(..., min_length=1)
    context: str = ""
    category: ClauseCategory
    compliance_frameworks: list[str] = Field(default_factory=list)
    jurisdiction: str = "US"
    risk_level: RiskLevel = RiskLevel.MEDIUM
    desired_improvements: list[str] = Field(default_factory=list)
    exclude_templates: list[str] = Field(default_factory=list)
    max_suggestions: int = Field(default=5, ge=1)

    @field_validator("compliance_frameworks", "desired_improvements", mode="before")
    @classmethod
    def normalize_values(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [item.value if isinstance(item, Enum) else item for item in v]
        return v


class MatchingSection(BaseModel):
    """A run of wording shared between a clause and a template."""

    start: int
    end: int
    content: str


class SuggestedReplacement(BaseModel):
    original: str
    replacement: str
    reasoning: str


class ClauseTemplateMatch(BaseModel):
    """A library template found similar to a clause."""

    template: ClauseTemplate
    similarity: float = Field(..., ge=0.0, le=1.0)
    matching_sections: list[MatchingSection] = Field(default_factory=list)
    suggested_replacements: list[SuggestedReplacement] = Field(default_factory=list)


class ClauseSuggestion(BaseModel):
    """A proposed replacement or rewrite of a clause."""

    id: str = Field(default_factory=lambda: new_id("suggestion"))
    original_clause: str
    suggested_clause: str
    suggestion_type: SuggestionType
    title: str
    description: str
    reasoning: str
    benefits: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    compliance_improvements: list[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: SuggestionSource
    suggested_by: str = "Clause Library Engine"
    related_template_id: str | None = None
    is_accepted: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# =============================================================================
# Comparison
# =============================================================================


class TextSpan(BaseModel):
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class ClauseDifference(BaseModel):
    type: DifferenceType
    original_text: str
    modified_text: str
    position: TextSpan
    impact: Impact
    description: str


class ClauseComparison(BaseModel):
    """Assessment of a proposed replacement against the original clause."""

    id: str = Field(default_factory=lambda: new_id("comparison"))
    original_clause: str
    suggested_clause: str
    differences: list[ClauseDifference] = Field(default_factory=list)
    overall_score: float = Field(..., ge=0.0, le=1.0)
    improvements: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    recommendation: Recommendation
    created_at: datetime = Field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
