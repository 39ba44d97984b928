"""
Clause comparison.

Aligns an original clause with a proposed replacement word by word,
classifies each change and its impact, and recommends whether to accept
the replacement.
"""

import re
from dataclasses import dataclass, field

import structlog

from contract_compliance.library.similarity import Token, align, span_text, tokenize
from contract_compliance.models.clause import (
    ClauseComparison,
    ClauseDifference,
    DifferenceType,
    Impact,
    Recommendation,
    TextSpan,
)
from contract_compliance.rules.matcher import (
    has_implementation_language,
    has_specific_details,
    implementation_quality,
)

logger = structlog.get_logger(__name__)


COMPLIANCE_TERMS_PATTERN = re.compile(
    r"\b(gdpr|hipaa|ccpa|sox|pci|compliance|regulat\w*|applicable law|"
    r"data protection|personal data|confidential\w*|audit\w*)\b",
    re.IGNORECASE,
)

DISCRETIONARY_PATTERN = re.compile(
    r"\b(may|reasonabl[ey]|best efforts|sole discretion|endeavou?rs?)\b",
    re.IGNORECASE,
)

POSITIVE_WEIGHT = 0.1
NEGATIVE_WEIGHT = 0.15
REWRITE_PENALTY = 0.2
MIN_RETAINED_RATIO = 0.2

ACCEPT_THRESHOLD = 0.8
REJECT_THRESHOLD = 0.4

GAINED = {
    "obligation": "Adds explicit obligation language",
    "detail": "Adds specific timeframes or procedures",
    "compliance": "Strengthens compliance terminology",
}
LOST = {
    "obligation": "Removes obligation language",
    "detail": "Removes specific timeframes or procedures",
    "compliance": "Removes compliance terminology",
}


def language_signals(text: str) -> set[str]:
    """Kinds of strengthening language present in text."""
    signals = set()
    if has_implementation_language(text):
        signals.add("obligation")
    if has_specific_details(text):
        signals.add("detail")
    if COMPLIANCE_TERMS_PATTERN.search(text):
        signals.add("compliance")
    return signals


def is_discretionary(text: str) -> bool:
    return DISCRETIONARY_PATTERN.search(text) is not None


@dataclass
class ChangeAssessment:
    """Strengthening and weakening effects of replacing old text with new."""
    improvements: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)

    @property
    def impact(self) -> Impact:
        balance = len(self.improvements) - len(self.concerns)
        if balance > 0:
            return Impact.POSITIVE
        if balance < 0:
            return Impact.NEGATIVE
        return Impact.NEUTRAL


def assess_change(old: str, new: str) -> ChangeAssessment:
    before, after = language_signals(old), language_signals(new)
    assessment = ChangeAssessment(
        improvements=[GAINED[s] for s in sorted(after - before)],
        concerns=[LOST[s] for s in sorted(before - after)],
    )

    if is_discretionary(new) and not is_discretionary(old):
        assessment.concerns.append("Introduces discretionary wording")
    elif is_discretionary(old) and not is_discretionary(new):
        assessment.improvements.append("Removes discretionary wording")

    return assessment


class ClauseComparator:
    """Compares an original clause against a suggested replacement."""

    def compare(self, original: str, suggested: str) -> ClauseComparison:
        a, b = tokenize(original), tokenize(suggested)
        matcher = align(a, b)

        differences, improvements, concerns = self.find_differences(original, suggested, a, b, matcher)

        retained = sum(block.size for block in matcher.get_matching_blocks())
        rewritten = bool(a) and retained / len(a) < MIN_RETAINED_RATIO
        if rewritten:
            concerns.append("Substantially rewrites the original clause")
        if not differences:
            concerns.append("No changes from the original clause")

        score = self.calculate_score(original, suggested, differences, rewritten)
        improvements = list(dict.fromkeys(improvements))
        concerns = list(dict.fromkeys(concerns))
        recommendation = self.make_recommendation(score, concerns)

        logger.debug(
            "clauses_compared",
            differences=len(differences),
            score=round(score, 3),
            recommendation=recommendation.value,
        )

        return ClauseComparison(
            original_clause=original,
            suggested_clause=suggested,
            differences=differences,
            overall_score=score,
            improvements=improvements,
            concerns=concerns,
            recommendation=recommendation,
        )

    def find_differences(
        self,
        original: str,
        suggested: str,
        a: list[Token],
        b: list[Token],
        matcher,
    ) -> tuple[list[ClauseDifference], list[str], list[str]]:
        """
        Classify every non-equal alignment opcode.

        Positions are character offsets into the original clause. A deleted
        run that reappears verbatim as an insertion elsewhere is reported
        once, as a reordering.
        """
        opcodes = [op for op in matcher.get_opcodes() if op[0] != "equal"]

        inserted = {
            idx: tuple(t.norm for t in b[j1:j2])
            for idx, (tag, _, _, j1, j2) in enumerate(opcodes)
            if tag == "insert"
        }
        moved: dict[int, int] = {}
        for idx, (tag, i1, i2, _, _) in enumerate(opcodes):
            if tag != "delete":
                continue
            run = tuple(t.norm for t in a[i1:i2])
            for ins_idx, ins_run in inserted.items():
                if ins_run == run and ins_idx not in moved.values():
                    moved[idx] = ins_idx
                    break

        differences: list[ClauseDifference] = []
        improvements: list[str] = []
        concerns: list[str] = []

        for idx, (tag, i1, i2, j1, j2) in enumerate(opcodes):
            if idx in moved.values():
                continue

            start, end, old = span_text(original, a, i1, i2)
            _, _, new = span_text(suggested, b, j1, j2)

            if idx in moved:
                _, _, _, mj1, mj2 = opcodes[moved[idx]]
                _, _, new = span_text(suggested, b, mj1, mj2)
                differences.append(ClauseDifference(
                    type=DifferenceType.REORDERING,
                    original_text=old,
                    modified_text=new,
                    position=TextSpan(start=start, end=end),
                    impact=Impact.NEUTRAL,
                    description=f"Moved '{old}'",
                ))
                continue

            assessment = assess_change(old, new)
            improvements.extend(assessment.improvements)
            concerns.extend(assessment.concerns)

            if tag == "insert":
                diff_type, description = DifferenceType.ADDITION, f"Added '{new}'"
            elif tag == "delete":
                diff_type, description = DifferenceType.DELETION, f"Removed '{old}'"
            else:
                diff_type, description = DifferenceType.MODIFICATION, f"Changed '{old}' to '{new}'"

            differences.append(ClauseDifference(
                type=diff_type,
                original_text=old,
                modified_text=new,
                position=TextSpan(start=start, end=end),
                impact=assessment.impact,
                description=description,
            ))

        return differences, improvements, concerns

    def calculate_score(
        self,
        original: str,
        suggested: str,
        differences: list[ClauseDifference],
        rewritten: bool = False,
    ) -> float:
        """
        Score a replacement in [0, 1]; 0.5 means neither better nor worse.

        Adjusted by the change in implementation quality and by the impact
        of each difference, with a penalty for wholesale rewrites.
        """
        score = 0.5 + implementation_quality(suggested) - implementation_quality(original)
        score += POSITIVE_WEIGHT * sum(1 for d in differences if d.impact == Impact.POSITIVE)
        score -= NEGATIVE_WEIGHT * sum(1 for d in differences if d.impact == Impact.NEGATIVE)
        if rewritten:
            score -= REWRITE_PENALTY
        return round(min(1.0, max(0.0, score)), 10)

    def make_recommendation(self, score: float, concerns: list[str]) -> Recommendation:
        if score > ACCEPT_THRESHOLD and not concerns:
            return Recommendation.ACCEPT
        if score < REJECT_THRESHOLD:
            return Recommendation.REJECT
        return Recommendation.MODIFY
