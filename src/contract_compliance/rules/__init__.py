"""Compliance rule catalog, corpus and matching."""

from .frameworks import (
    ALL_COMPLIANCE_RULES,
    FRAMEWORK_WEIGHTS,
    RISK_LEVEL_WEIGHTS,
    get_framework_weight,
)
from .corpus import RuleCorpus, build_rule
from .matcher import PatternMatcher, RuleMatch, implementation_quality

__all__ = [
    "ALL_COMPLIANCE_RULES",
    "FRAMEWORK_WEIGHTS",
    "RISK_LEVEL_WEIGHTS",
    "get_framework_weight",
    "RuleCorpus",
    "build_rule",
    "PatternMatcher",
    "RuleMatch",
    "implementation_quality",
]
