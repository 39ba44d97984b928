"""Compliance scoring and analysis."""

from .scorer import ComplianceScorer, classify, make_thresholds
from .analyzer import ComplianceAnalyzer, generate_auto_tags

__all__ = [
    "ComplianceScorer",
    "classify",
    "make_thresholds",
    "ComplianceAnalyzer",
    "generate_auto_tags",
]
