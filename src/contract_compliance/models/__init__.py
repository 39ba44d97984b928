"""
Pydantic models for the compliance engine.

- Compliance models: rules, violations, scores, analysis results
- Clause models: templates, libraries, suggestions, comparisons, usage
"""

from contract_compliance.models.compliance import (
    ClauseCategory,
    ComplianceConfiguration,
    ComplianceRule,
    ComplianceScore,
    ComplianceViolation,
    ContractComplianceAnalysis,
    Framework,
    NotificationSettings,
    RiskLevel,
    RiskThresholds,
    ViolationKind,
)
from contract_compliance.models.clause import (
    ClauseAnalytics,
    ClauseComparison,
    ClauseDifference,
    ClauseLibrary,
    ClauseMetadata,
    ClauseSearchFilters,
    ClauseStatus,
    ClauseSuggestion,
    ClauseTemplate,
    ClauseTemplateMatch,
    ClauseUsage,
    ClauseVersion,
    Complexity,
    DifferenceType,
    Impact,
    ImprovementGoal,
    LibrarySettings,
    MatchingSection,
    Recommendation,
    SmartSuggestionRequest,
    SuggestedReplacement,
    SuggestionSource,
    SuggestionType,
)

__all__ = [
    # Compliance models
    "ClauseCategory",
    "ComplianceConfiguration",
    "ComplianceRule",
    "ComplianceScore",
    "ComplianceViolation",
    "ContractComplianceAnalysis",
    "Framework",
    "NotificationSettings",
    "RiskLevel",
    "RiskThresholds",
    "ViolationKind",
    # Clause models
    "ClauseAnalytics",
    "ClauseComparison",
    "ClauseDifference",
    "ClauseLibrary",
    "ClauseMetadata",
    "ClauseSearchFilters",
    "ClauseStatus",
    "ClauseSuggestion",
    "ClauseTemplate",
    "ClauseTemplateMatch",
    "ClauseUsage",
    "ClauseVersion",
    "Complexity",
    "DifferenceType",
    "Impact",
    "ImprovementGoal",
    "LibrarySettings",
    "MatchingSection",
    "Recommendation",
    "SmartSuggestionRequest",
    "SuggestedReplacement",
    "SuggestionSource",
    "SuggestionType",
]
