"""
Smart clause suggestions.

Suggestions come from two sources: library templates similar to the
clause (legal precedent) and heuristic rewrites for the improvement goals
the caller asked for (clarity, compliance, risk reduction).
"""

import re

import structlog

from contract_compliance.config import get_settings
from contract_compliance.library.similarity import SimilarityMatcher
from contract_compliance.models.clause import (
    ClauseLibrary,
    ClauseSuggestion,
    ClauseTemplateMatch,
    ImprovementGoal,
    SmartSuggestionRequest,
    SuggestionSource,
    SuggestionType,
)
from contract_compliance.rules.matcher import IMPLEMENTATION_INDICATORS

logger = structlog.get_logger(__name__)


CLARITY_CONFIDENCE = 0.8
COMPLIANCE_CONFIDENCE = 0.9
RISK_REDUCTION_CONFIDENCE = 0.7

# (pattern, replacement) pairs applied in order
CLARITY_REWRITES = [
    (re.compile(r"\b(shall|must|will)\b", re.IGNORECASE), "will"),
    (re.compile(r"\b(notwithstanding|pursuant to)\b", re.IGNORECASE), "despite"),
    (re.compile(r"\b(hereby|whereas)\b", re.IGNORECASE), ""),
]

COMPLIANCE_BOILERPLATE = {
    "GDPR": "Data subjects have the right to access, rectify, erase, and port their personal data.",
    "HIPAA": "Protected Health Information shall be handled in accordance with HIPAA requirements.",
    "CCPA": (
        "Consumers have the right to know what personal information is collected, "
        "to request its deletion, and to opt out of its sale."
    ),
    "SOX": (
        "The parties shall maintain internal controls over financial reporting and "
        "retain supporting records for audit purposes."
    ),
    "PCI-DSS": (
        "Cardholder data shall be stored, processed and transmitted only in accordance "
        "with the PCI Data Security Standard."
    ),
}

STATUTORY_LIMITATION = "This provision is subject to applicable law and may be limited by statute."

_MULTI_SPACE_RE = re.compile(r"[ \t]{2,}")


def match_case(word: str, replacement: str) -> str:
    """Give the replacement the capitalisation of the word it replaces."""
    if len(word) > 1 and word.isupper():
        return replacement.upper()
    if word[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def improve_clarity(clause: str) -> str:
    """Replace legalese with plain wording, keeping each word's capitalisation."""
    improved = clause
    for pattern, replacement in CLARITY_REWRITES:
        improved = pattern.sub(lambda m, r=replacement: match_case(m.group(0), r), improved)
    improved = _MULTI_SPACE_RE.sub(" ", improved)
    return re.sub(r" +([,.;:])", r"\1", improved).strip()


def improve_compliance(clause: str, frameworks: list[str]) -> tuple[str, list[str]]:
    """
    Append boilerplate paragraphs for each framework that has one.

    Returns the improved clause and the frameworks that contributed.
    """
    improved = clause
    applied = []
    for framework in frameworks:
        paragraph = COMPLIANCE_BOILERPLATE.get(framework)
        if paragraph:
            improved += f"\n\n{paragraph}"
            applied.append(framework)
    return improved, applied


def reduce_risk(clause: str) -> str:
    return f"{clause}\n\n{STATUTORY_LIMITATION}"


def obligation_strength(text: str) -> int:
    """Number of distinct obligation indicators present in text."""
    text_lower = text.lower()
    return sum(1 for indicator in IMPLEMENTATION_INDICATORS if indicator in text_lower)


class SuggestionGenerator:
    """Builds ranked clause suggestions for a request."""

    def __init__(
        self,
        matcher: SimilarityMatcher | None = None,
        template_threshold: float | None = None,
    ):
        self.matcher = matcher or SimilarityMatcher()
        self.template_threshold = (
            get_settings().template_suggestion_threshold
            if template_threshold is None
            else template_threshold
        )

    def generate(
        self,
        request: SmartSuggestionRequest,
        library: ClauseLibrary,
    ) -> list[ClauseSuggestion]:
        """
        Generate suggestions, highest confidence first.

        At most request.max_suggestions suggestions are returned.
        """
        suggestions: list[ClauseSuggestion] = []

        for match in self.matcher.find_similar_clauses(request.original_clause, library, request):
            suggestion = self.from_template(request, match)
            if suggestion:
                suggestions.append(suggestion)

        suggestions.extend(self.heuristic_suggestions(request))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        suggestions = suggestions[: request.max_suggestions]

        logger.info(
            "suggestions_generated",
            library_id=library.id,
            category=request.category.value,
            count=len(suggestions),
        )
        return suggestions

    def from_template(
        self,
        request: SmartSuggestionRequest,
        match: ClauseTemplateMatch,
    ) -> ClauseSuggestion | None:
        """Suggest a similar template's wording verbatim."""
        if match.similarity < self.template_threshold:
            return None

        template = match.template
        suggestion_type = self.determine_suggestion_type(request, match)
        shared = [f for f in request.compliance_frameworks if f in template.compliance_frameworks]

        return ClauseSuggestion(
            original_clause=request.original_clause,
            suggested_clause=template.content,
            suggestion_type=suggestion_type,
            title=f"Improve {template.title}",
            description=f"Based on similar clause: {template.title}",
            reasoning=(
                f"The suggested clause provides better "
                f"{suggestion_type.value.lower().replace('_', ' ')} based on proven legal precedents."
            ),
            benefits=["Improved legal clarity", "Better risk management", "Enhanced enforceability"],
            risks=["May require legal review", "Could affect existing agreements"],
            compliance_improvements=[f"Enhanced {f} compliance" for f in shared],
            confidence=match.similarity,
            source=SuggestionSource.LEGAL_PRECEDENT,
            related_template_id=template.id,
        )

    def determine_suggestion_type(
        self,
        request: SmartSuggestionRequest,
        match: ClauseTemplateMatch,
    ) -> SuggestionType:
        template = match.template
        if template.risk_level.rank < request.risk_level.rank:
            return SuggestionType.RISK_REDUCTION
        if obligation_strength(template.content) > obligation_strength(request.original_clause):
            return SuggestionType.LEGAL_STRENGTH
        return SuggestionType.IMPROVEMENT

    def heuristic_suggestions(self, request: SmartSuggestionRequest) -> list[ClauseSuggestion]:
        """Rewrites for each requested improvement goal."""
        goals = set(request.desired_improvements)
        suggestions = []

        if ImprovementGoal.CLARITY.value in goals:
            suggestions.append(self.clarity_suggestion(request))
        if ImprovementGoal.COMPLIANCE.value in goals:
            suggestion = self.compliance_suggestion(request)
            if suggestion:
                suggestions.append(suggestion)
        if ImprovementGoal.RISK_REDUCTION.value in goals:
            suggestions.append(self.risk_reduction_suggestion(request))

        return suggestions

    def clarity_suggestion(self, request: SmartSuggestionRequest) -> ClauseSuggestion:
        return ClauseSuggestion(
            original_clause=request.original_clause,
            suggested_clause=improve_clarity(request.original_clause),
            suggestion_type=SuggestionType.CLARITY,
            title="Improve Clarity and Readability",
            description="Simplified language and improved structure for better understanding",
            reasoning=(
                "The suggested version uses clearer language and removes archaic terms "
                "to improve readability and reduce ambiguity."
            ),
            benefits=["Improved readability", "Reduced ambiguity", "Better user understanding", "Easier to enforce"],
            risks=["May change legal meaning", "Requires legal review"],
            confidence=CLARITY_CONFIDENCE,
            source=SuggestionSource.AI_ANALYSIS,
            suggested_by="Clarity Analyzer",
        )

    def compliance_suggestion(self, request: SmartSuggestionRequest) -> ClauseSuggestion | None:
        improved, applied = improve_compliance(request.original_clause, request.compliance_frameworks)
        if not applied:
            return None

        frameworks = ", ".join(applied)
        return ClauseSuggestion(
            original_clause=request.original_clause,
            suggested_clause=improved,
            suggestion_type=SuggestionType.COMPLIANCE,
            title="Enhance Compliance",
            description=f"Improved compliance with {frameworks}",
            reasoning=(
                f"The suggested version includes specific compliance requirements for "
                f"{frameworks} in {request.jurisdiction}."
            ),
            benefits=["Better regulatory compliance", "Reduced legal risk", "Clearer obligations", "Audit-friendly language"],
            risks=["May increase complexity", "Requires ongoing monitoring"],
            compliance_improvements=applied,
            confidence=COMPLIANCE_CONFIDENCE,
            source=SuggestionSource.AI_ANALYSIS,
            suggested_by="Compliance Analyzer",
        )

    def risk_reduction_suggestion(self, request: SmartSuggestionRequest) -> ClauseSuggestion:
        return ClauseSuggestion(
            original_clause=request.original_clause,
            suggested_clause=reduce_risk(request.original_clause),
            suggestion_type=SuggestionType.RISK_REDUCTION,
            title="Reduce Legal Risk",
            description="Added protective language and risk mitigation measures",
            reasoning=(
                "The suggested version limits the provision to what applicable law permits, "
                "reducing potential legal exposure."
            ),
            benefits=["Reduced legal exposure", "Better risk allocation", "Clearer limitations", "Protective language"],
            risks=["May be overly restrictive", "Could affect enforceability"],
            confidence=RISK_REDUCTION_CONFIDENCE,
            source=SuggestionSource.AI_ANALYSIS,
            suggested_by="Risk Analyzer",
        )
