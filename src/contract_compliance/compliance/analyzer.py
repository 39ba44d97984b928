"""
Rule-based contract compliance analysis.

Runs every applicable rule of each requested framework against the
contract text, turns absent or weakly expressed requirements into
violations and aggregates framework scores into a single analysis.
"""

import re
import threading
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import uuid4

import structlog

from contract_compliance.config import Settings, get_settings
from contract_compliance.compliance.scorer import ComplianceScorer, make_thresholds
from contract_compliance.models.compliance import (
    ClauseCategory,
    ComplianceConfiguration,
    ComplianceRule,
    ComplianceScore,
    ComplianceViolation,
    ContractComplianceAnalysis,
    RiskLevel,
    RiskThresholds,
    ViolationKind,
    utcnow,
)
from contract_compliance.rules.corpus import RuleCorpus
from contract_compliance.rules.matcher import PatternMatcher, implementation_quality

logger = structlog.get_logger(__name__)


# Categories that earn an extra, issue-specific tag when violated
CATEGORY_ISSUE_TAGS = {
    ClauseCategory.DATA_PROTECTION: "data-protection-issues",
    ClauseCategory.FINANCIAL_REPORTING: "financial-compliance-issues",
    ClauseCategory.HEALTHCARE_PRIVACY: "healthcare-privacy-issues",
}


def generate_contract_id(document_name: str, timestamp_ms: int) -> str:
    """Derive a contract id from the document name and analysis time."""
    return f"contract_{timestamp_ms}_{re.sub(r'[^a-zA-Z0-9]', '_', document_name)}"


def generate_auto_tags(violations: list[ComplianceViolation], framework: str) -> list[str]:
    """
    Derive tags for a framework's violations.

    Includes the framework name, one "<severity>-risk" tag per severity,
    one hyphenated tag per violated category and issue-specific tags.
    """
    tags = [framework]

    severities = dict.fromkeys(v.severity for v in violations)
    tags.extend(f"{s.value.lower()}-risk" for s in severities)

    categories = dict.fromkeys(v.category for v in violations)
    tags.extend(c.tag for c in categories)

    for category, tag in CATEGORY_ISSUE_TAGS.items():
        if category in categories:
            tags.append(tag)

    return list(dict.fromkeys(tags))


class ComplianceAnalyzer:
    """
    Analyzes contract text against compliance framework rules.

    The analyzer holds a reference to an immutable RuleCorpus. Each call
    reads that reference once, so rule updates made through
    add_custom_rule/update_rule/delete_rule never affect an analysis that
    is already running.
    """

    def __init__(
        self,
        corpus: RuleCorpus | None = None,
        matcher: PatternMatcher | None = None,
        scorer: ComplianceScorer | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self._corpus = corpus if corpus is not None else self._load_corpus()
        self.matcher = matcher or PatternMatcher()
        self.scorer = scorer or ComplianceScorer(settings=self.settings)
        self._write_lock = threading.Lock()

    def _load_corpus(self) -> RuleCorpus:
        if self.settings.custom_rules_path:
            return RuleCorpus.from_json_file(self.settings.custom_rules_path)
        return RuleCorpus.default()

    @property
    def corpus(self) -> RuleCorpus:
        return self._corpus

    # =========================================================================
    # Analysis
    # =========================================================================

    def analyze_contract(
        self,
        text: str,
        document_name: str,
        frameworks: Iterable[str],
        jurisdiction: str | None = None,
        client_id: str | None = None,
        custom_rules: Iterable[ComplianceRule | Mapping[str, Any]] = (),
        configuration: ComplianceConfiguration | None = None,
        corpus: RuleCorpus | None = None,
    ) -> ContractComplianceAnalysis:
        """
        Analyze contract text against the requested frameworks.

        Args:
            text: Contract text
            document_name: Name of the analysed document
            frameworks: Framework names, e.g. ["GDPR", "HIPAA"]
            jurisdiction: Jurisdiction used to scope rules (defaults from settings)
            client_id: Client used to scope client-specific rules
            custom_rules: Extra rules overlaid on the corpus for this call only
            configuration: Organisation configuration (custom rules, thresholds, tagging)
            corpus: Corpus override for this call

        Returns:
            ContractComplianceAnalysis with per-framework scores and issues
        """
        corpus = corpus if corpus is not None else self._corpus
        scorer = self.scorer
        auto_tagging = True

        overlay = list(custom_rules)
        if configuration is not None:
            overlay = [*configuration.custom_rules, *overlay]
            if configuration.risk_thresholds is not None:
                scorer = ComplianceScorer(configuration.risk_thresholds)
            auto_tagging = configuration.auto_tagging_enabled
            jurisdiction = jurisdiction or configuration.jurisdiction
            client_id = client_id or configuration.client_id
        corpus = corpus.with_rules(overlay)

        jurisdiction = jurisdiction or self.settings.default_jurisdiction
        analyzed_at = utcnow()

        frameworks = [getattr(f, "value", f) for f in frameworks]
        framework_scores: list[ComplianceScore] = []
        auto_tags: list[str] = []

        for framework in frameworks:
            rules = corpus.applicable_rules(framework, jurisdiction, client_id)
            violations = self.analyze_framework(text, rules, framework)

            score = scorer.score_framework(
                violations, framework, total_rules=corpus.rule_count(framework)
            )
            framework_scores.append(score)

            if auto_tagging:
                auto_tags.extend(generate_auto_tags(violations, framework))

        overall_score = scorer.overall_score(framework_scores)
        overall_risk_level = scorer.classify(overall_score)

        violations = [v for score in framework_scores for v in score.violations]
        critical_issues = [v for v in violations if v.severity == RiskLevel.CRITICAL]
        medium_issues = [v for v in violations if v.severity == RiskLevel.HIGH]
        low_issues = [v for v in violations if v.severity in (RiskLevel.MEDIUM, RiskLevel.LOW)]

        contract_id = generate_contract_id(document_name, int(analyzed_at.timestamp() * 1000))

        logger.info(
            "contract_analyzed",
            contract_id=contract_id,
            frameworks=frameworks,
            jurisdiction=jurisdiction,
            violations=len(violations),
            overall_score=round(overall_score, 2),
            overall_risk_level=overall_risk_level.value,
        )

        return ContractComplianceAnalysis(
            contract_id=contract_id,
            document_name=document_name,
            frameworks=framework_scores,
            overall_risk_level=overall_risk_level,
            overall_compliance_score=overall_score,
            critical_issues=critical_issues,
            medium_issues=medium_issues,
            low_issues=low_issues,
            auto_tags=auto_tags,
            jurisdiction=jurisdiction,
            client_id=client_id,
            analyzed_at=analyzed_at,
        )

    def analyze_framework(
        self,
        text: str,
        rules: list[ComplianceRule],
        framework: str,
    ) -> list[ComplianceViolation]:
        """Evaluate the selected rules of one framework against text."""
        violations: list[ComplianceViolation] = []

        for rule in rules:
            matches = self.matcher.find_matches(text, rule)

            if not matches:
                if rule.weight > self.settings.missing_rule_weight_threshold:
                    violations.append(self._missing_rule_violation(rule, framework))
                continue

            quality = implementation_quality(text)
            if quality < self.settings.implementation_quality_threshold:
                violations.append(self._implementation_violation(rule, framework, quality))

        return violations

    def _missing_rule_violation(self, rule: ComplianceRule, framework: str) -> ComplianceViolation:
        return ComplianceViolation(
            id=f"violation_{rule.id}_{uuid4().hex[:8]}",
            rule_id=rule.id,
            rule=rule,
            clause_id=ViolationKind.MISSING,
            severity=rule.risk_level,
            description=f"Missing required {rule.name} provision",
            explanation=f"{rule.description}. This is a critical requirement for {framework} compliance.",
            suggested_action=f"Add a clause that {rule.description.lower()}",
        )

    def _implementation_violation(
        self,
        rule: ComplianceRule,
        framework: str,
        quality: float,
    ) -> ComplianceViolation:
        severity = RiskLevel.HIGH if quality < 0.3 else RiskLevel.MEDIUM
        return ComplianceViolation(
            id=f"violation_{rule.id}_{uuid4().hex[:8]}",
            rule_id=rule.id,
            rule=rule,
            clause_id=ViolationKind.IMPLEMENTATION,
            severity=severity,
            description=f"Insufficient implementation of {rule.name}",
            explanation=(
                f"The {rule.name} provision exists but lacks sufficient detail or "
                f"specificity for {framework} compliance."
            ),
            suggested_action="Enhance the clause with specific procedures, timeframes, and responsibilities.",
        )

    # =========================================================================
    # Rule management
    # =========================================================================

    def get_rules_by_framework(self, framework: str) -> list[ComplianceRule]:
        return self._corpus.for_framework(framework)

    def get_rules_by_category(self, category: ClauseCategory | str) -> list[ComplianceRule]:
        return self._corpus.for_category(category)

    def add_custom_rule(self, rule: ComplianceRule | Mapping[str, Any]) -> ComplianceRule:
        """Register a custom rule for all subsequent analyses."""
        with self._write_lock:
            corpus = self._corpus.with_rules([rule])
            added = corpus.rules[-1]
            self._corpus = corpus
        logger.info("custom_rule_added", rule_id=added.id, framework=added.framework)
        return added

    def update_rule(self, rule_id: str, **changes: Any) -> ComplianceRule:
        """Replace a rule with an updated copy."""
        with self._write_lock:
            self._corpus = self._corpus.with_rule_updated(rule_id, **changes)
            updated = self._corpus.get(changes.get("id", rule_id))
        logger.info("rule_updated", rule_id=rule_id, fields=sorted(changes))
        return updated

    def delete_rule(self, rule_id: str) -> None:
        with self._write_lock:
            self._corpus = self._corpus.without_rule(rule_id)
        logger.info("rule_deleted", rule_id=rule_id)

    def with_thresholds(self, thresholds: RiskThresholds | Mapping[str, float]) -> "ComplianceAnalyzer":
        """Analyzer sharing this corpus but classifying with other thresholds."""
        return ComplianceAnalyzer(
            corpus=self._corpus,
            matcher=self.matcher,
            scorer=ComplianceScorer(make_thresholds(thresholds)),
            settings=self.settings,
        )
