"""
Compliance scoring and risk classification.

Converts the violations found for a framework into a 0-100 score, a risk
level and a list of recommendations.
"""

from collections.abc import Iterable, Mapping

import structlog
from pydantic import ValidationError

from contract_compliance.config import Settings, get_settings
from contract_compliance.exceptions import ThresholdConfigurationError
from contract_compliance.models.compliance import (
    ClauseCategory,
    ComplianceScore,
    ComplianceViolation,
    RiskLevel,
    RiskThresholds,
)
from contract_compliance.rules.frameworks import RISK_LEVEL_WEIGHTS, get_framework_weight

logger = structlog.get_logger(__name__)


DEFAULT_THRESHOLDS = RiskThresholds()


def make_thresholds(
    thresholds: RiskThresholds | Mapping[str, float] | None = None,
    settings: Settings | None = None,
) -> RiskThresholds:
    """
    Resolve risk thresholds from an explicit value or settings.

    Raises:
        ThresholdConfigurationError: if the thresholds are out of order.
    """
    if isinstance(thresholds, RiskThresholds):
        return thresholds
    try:
        if thresholds is None:
            settings = settings or get_settings()
            return RiskThresholds(
                low=settings.risk_threshold_low,
                medium=settings.risk_threshold_medium,
                high=settings.risk_threshold_high,
            )
        return RiskThresholds.from_mapping(dict(thresholds))
    except ValidationError as e:
        raise ThresholdConfigurationError(
            message="Invalid risk thresholds",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def classify(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> RiskLevel:
    """Map a score to a risk level (defaults: >=90 LOW, >=70 MEDIUM, >=50 HIGH)."""
    if score >= thresholds.low:
        return RiskLevel.LOW
    if score >= thresholds.medium:
        return RiskLevel.MEDIUM
    if score >= thresholds.high:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


class ComplianceScorer:
    """Scores framework violations and derives recommendations."""

    def __init__(
        self,
        thresholds: RiskThresholds | Mapping[str, float] | None = None,
        settings: Settings | None = None,
    ):
        self.thresholds = make_thresholds(thresholds, settings)

    def classify(self, score: float) -> RiskLevel:
        return classify(score, self.thresholds)

    def calculate_score(
        self,
        violations: list[ComplianceViolation],
        framework: str,
        total_rules: int,
    ) -> float:
        """
        Calculate the framework score.

        Base score is the share of rules without violations, reduced by a
        severity penalty and scaled by the framework trust weight. A
        framework without rules is fully compliant.
        """
        if total_rules <= 0:
            return 100.0

        score = max(0.0, 100.0 - (len(violations) / total_rules) * 100.0)

        penalty = sum(RISK_LEVEL_WEIGHTS[v.severity] * 10 for v in violations)
        score = max(0.0, score - penalty)

        score = score * get_framework_weight(framework)
        return min(score, 100.0)

    def score_framework(
        self,
        violations: list[ComplianceViolation],
        framework: str,
        total_rules: int,
    ) -> ComplianceScore:
        """Build the ComplianceScore for one framework."""
        score = self.calculate_score(violations, framework, total_rules)
        risk_level = self.classify(score)

        logger.debug(
            "framework_scored",
            framework=framework,
            violations=len(violations),
            total_rules=total_rules,
            score=score,
            risk_level=risk_level.value,
        )

        return ComplianceScore(
            framework=framework,
            overall_score=score,
            risk_level=risk_level,
            violations=violations,
            recommendations=self.generate_recommendations(violations, framework),
        )

    def overall_score(self, scores: Iterable[ComplianceScore]) -> float:
        """
        Weighted mean of framework scores.

        Each framework score already carries its trust weight, so the
        weight is applied a second time here.
        """
        scores = list(scores)
        if not scores:
            return 0.0

        total_weight = sum(get_framework_weight(s.framework) for s in scores)
        total_score = sum(s.overall_score * get_framework_weight(s.framework) for s in scores)
        return min(total_score / total_weight, 100.0)

    def generate_recommendations(
        self,
        violations: list[ComplianceViolation],
        framework: str,
    ) -> list[str]:
        """Generate recommendations grouped by violated category."""
        recommendations: list[str] = []

        if not violations:
            recommendations.append(f"Contract appears to be compliant with {framework} requirements.")
        else:
            by_category: dict[ClauseCategory, list[ComplianceViolation]] = {}
            for violation in violations:
                by_category.setdefault(violation.category, []).append(violation)

            for category, category_violations in by_category.items():
                critical_count = sum(1 for v in category_violations if v.severity == RiskLevel.CRITICAL)
                high_count = sum(1 for v in category_violations if v.severity == RiskLevel.HIGH)

                if critical_count > 0:
                    recommendations.append(
                        f"URGENT: Address {critical_count} critical {category.label} issues immediately."
                    )
                if high_count > 0:
                    recommendations.append(
                        f"HIGH PRIORITY: Resolve {high_count} high-risk {category.label} issues."
                    )

            if any(v.severity == RiskLevel.CRITICAL for v in violations):
                recommendations.append("Consider legal review before proceeding with this contract.")

        recommendations.append(f"Implement regular compliance monitoring for {framework} requirements.")
        recommendations.append("Consider adding compliance training for contract stakeholders.")

        return recommendations
