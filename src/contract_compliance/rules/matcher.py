"""Keyword and pattern matching of compliance rules against contract text.

Also provides the heuristic implementation-quality signals used to judge
whether matched language is specific enough.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from contract_compliance.models.compliance import ComplianceRule


# Obligation language that signals an enforceable provision
IMPLEMENTATION_INDICATORS = (
    "shall", "must", "will", "required", "obligation", "responsibility",
    "procedure", "process", "policy", "standard", "guideline",
)

# Dates, timeframes and procedures
SPECIFIC_DETAIL_PATTERN = re.compile(
    r"\d+|\b(day|month|year|hour|minute)\b|procedure|process", re.IGNORECASE
)

LEGAL_LANGUAGE_PATTERN = re.compile(
    r"\b(hereby|whereas|therefore|notwithstanding|pursuant)\b", re.IGNORECASE
)


@dataclass(frozen=True)
class RuleMatch:
    """Evidence that a rule is present in a text."""
    rule_id: str
    source: str  # "pattern" or "keyword"
    matched: str
    start: int | None = None
    end: int | None = None


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a rule pattern case-insensitively (cached)."""
    return re.compile(pattern, re.IGNORECASE)


class PatternMatcher:
    """
    Evaluates a rule's patterns and keywords against text.

    A rule matches when any pattern matches or any keyword occurs as a
    case-insensitive substring. Stateless apart from the shared compiled
    pattern cache, so one instance can serve concurrent callers.
    """

    def compile(self, rule: ComplianceRule) -> list[re.Pattern]:
        """Compile every pattern of a rule."""
        return [compile_pattern(p) for p in rule.patterns]

    def find_matches(self, text: str, rule: ComplianceRule) -> list[RuleMatch]:
        """Find all pattern and keyword evidence for a rule in text."""
        matches: list[RuleMatch] = []

        for pattern in self.compile(rule):
            m = pattern.search(text)
            if m:
                matches.append(RuleMatch(
                    rule_id=rule.id,
                    source="pattern",
                    matched=m.group(0),
                    start=m.start(),
                    end=m.end(),
                ))

        text_lower = text.lower()
        for keyword in rule.keywords:
            index = text_lower.find(keyword.lower())
            if index >= 0:
                matches.append(RuleMatch(
                    rule_id=rule.id,
                    source="keyword",
                    matched=keyword,
                    start=index,
                    end=index + len(keyword),
                ))

        return matches

    def matches(self, text: str, rule: ComplianceRule) -> bool:
        """Check whether any evidence for the rule exists in text."""
        return bool(self.find_matches(text, rule))


def has_implementation_language(text: str) -> bool:
    text_lower = text.lower()
    return any(indicator in text_lower for indicator in IMPLEMENTATION_INDICATORS)


def has_specific_details(text: str) -> bool:
    return SPECIFIC_DETAIL_PATTERN.search(text) is not None


def has_legal_language(text: str) -> bool:
    return LEGAL_LANGUAGE_PATTERN.search(text) is not None


def implementation_quality(text: str) -> float:
    """
    Heuristic quality of how a provision is expressed, in [0, 1].

    Starts at 0.5, +0.2 for obligation language, +0.2 for specific
    details (numbers, time units, procedures), +0.1 for legal boilerplate.
    """
    quality = 0.5

    if has_implementation_language(text):
        quality += 0.2
    if has_specific_details(text):
        quality += 0.2
    if has_legal_language(text):
        quality += 0.1

    return min(round(quality, 10), 1.0)
