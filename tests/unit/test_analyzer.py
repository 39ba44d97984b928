"""Tests for contract_compliance/compliance/analyzer.py — end-to-end compliance analysis."""

import json
import re
import threading

import pytest

from contract_compliance.compliance.analyzer import ComplianceAnalyzer, generate_auto_tags
from contract_compliance.config import Settings
from contract_compliance.exceptions import RuleNotFoundError
from contract_compliance.models.compliance import (
    ClauseCategory,
    ComplianceConfiguration,
    Framework,
    RiskLevel,
    RiskThresholds,
    ViolationKind,
)
from contract_compliance.rules.corpus import RuleCorpus


def missing_rule_ids(analysis, framework="GDPR"):
    score = analysis.score_for(framework)
    return [v.rule_id for v in score.violations if v.clause_id == ViolationKind.MISSING]


class TestNonCompliantContract:

    def test_missing_required_rules(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US")
        missing = missing_rule_ids(analysis)
        assert "gdpr-lawful-basis" in missing
        assert "gdpr-data-subject-rights" in missing

    def test_overall_risk_critical(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US")
        assert analysis.overall_compliance_score < 50
        assert analysis.overall_risk_level == RiskLevel.CRITICAL

    def test_each_missing_rule_reported_once(self, analyzer, non_compliant_text, corpus):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US")
        missing = missing_rule_ids(analysis)
        required = [r.id for r in corpus.for_framework("GDPR") if r.weight > 0.7]
        for rule_id in required:
            assert missing.count(rule_id) == 1

    def test_missing_violation_text(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US")
        violation = next(v for v in analysis.violations if v.rule_id == "gdpr-lawful-basis")
        assert violation.severity == RiskLevel.CRITICAL
        assert violation.suggested_action == "Add a clause that contract must specify lawful basis for data processing"
        assert violation.id.startswith("violation_gdpr-lawful-basis_")

    def test_low_weight_rule_not_required(self, analyzer, non_compliant_text):
        # soc2-availability has weight 0.6
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["SOC2"], "US")
        assert "soc2-availability" not in missing_rule_ids(analysis, "SOC2")
        assert "soc2-confidentiality" in missing_rule_ids(analysis, "SOC2")


class TestCompliantContract:

    def test_matched_rules_not_missing(self, analyzer, gdpr_rights_text):
        analysis = analyzer.analyze_contract(gdpr_rights_text, "dpa.txt", ["GDPR"], "US")
        missing = missing_rule_ids(analysis)
        assert "gdpr-data-subject-rights" not in missing
        assert "gdpr-lawful-basis" not in missing

    def test_no_implementation_violations_with_specific_language(self, analyzer, gdpr_rights_text):
        analysis = analyzer.analyze_contract(gdpr_rights_text, "dpa.txt", ["GDPR"], "US")
        kinds = {v.clause_id for v in analysis.violations}
        assert ViolationKind.IMPLEMENTATION not in kinds

    def test_vague_language_flagged(self, analyzer):
        text = "Consent is collected from users."
        analysis = analyzer.analyze_contract(text, "vague.txt", ["GDPR"], "US")
        violation = next(v for v in analysis.violations if v.rule_id == "gdpr-lawful-basis")
        assert violation.clause_id == ViolationKind.IMPLEMENTATION
        assert violation.severity == RiskLevel.MEDIUM


class TestScoring:

    def test_risk_level_consistent_with_score(self, analyzer, gdpr_rights_text):
        analysis = analyzer.analyze_contract(gdpr_rights_text, "dpa.txt", ["GDPR", "HIPAA", "SOC2"], "US")
        for score in analysis.frameworks:
            assert score.risk_level == analyzer.scorer.classify(score.overall_score)
        assert analysis.overall_risk_level == analyzer.scorer.classify(analysis.overall_compliance_score)

    def test_unknown_framework_fully_compliant(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], "US")
        score = analysis.score_for("ACME")
        assert score.overall_score == 100.0
        assert score.risk_level == RiskLevel.LOW
        assert score.violations == []

    def test_empty_framework_list(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", [], "US")
        assert analysis.overall_compliance_score == 0.0
        assert analysis.overall_risk_level == RiskLevel.CRITICAL

    def test_framework_enum_accepted(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", [Framework.HIPAA], "US")
        assert analysis.score_for("HIPAA") is not None


class TestIssueBuckets:

    def test_bucketing(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR", "SOC2"], "US")
        assert all(v.severity == RiskLevel.CRITICAL for v in analysis.critical_issues)
        assert all(v.severity == RiskLevel.HIGH for v in analysis.medium_issues)
        assert all(v.severity in (RiskLevel.MEDIUM, RiskLevel.LOW) for v in analysis.low_issues)
        total = len(analysis.critical_issues) + len(analysis.medium_issues) + len(analysis.low_issues)
        assert total == len(analysis.violations)

    def test_critical_bucket_contents(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US")
        assert [v.rule_id for v in analysis.critical_issues] == ["gdpr-lawful-basis"]


class TestAutoTags:

    def test_no_duplicates(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(
            non_compliant_text, "nda.txt", ["GDPR", "HIPAA", "SOX", "GDPR"], "US"
        )
        assert len(analysis.auto_tags) == len(set(analysis.auto_tags))

    def test_tag_contents(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR", "HIPAA"], "US")
        tags = set(analysis.auto_tags)
        assert {"GDPR", "HIPAA", "critical-risk", "high-risk"} <= tags
        assert {"data-protection", "consent-management", "healthcare-privacy"} <= tags
        assert {"data-protection-issues", "healthcare-privacy-issues"} <= tags
        assert "financial-compliance-issues" not in tags

    def test_compliant_framework_only_tags_name(self):
        assert generate_auto_tags([], "GDPR") == ["GDPR"]

    def test_auto_tagging_disabled(self, analyzer, non_compliant_text):
        configuration = ComplianceConfiguration(id="org-1", auto_tagging_enabled=False)
        analysis = analyzer.analyze_contract(
            non_compliant_text, "nda.txt", ["GDPR"], configuration=configuration
        )
        assert analysis.auto_tags == []


class TestContractIdentity:

    def test_contract_id_format(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "Master Services (v2).docx", ["GDPR"], "US")
        assert re.fullmatch(r"contract_\d+_Master_Services__v2__docx", analysis.contract_id)

    def test_default_jurisdiction(self, analyzer, non_compliant_text):
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"])
        assert analysis.jurisdiction == "US"

    def test_to_dict_is_json_serializable(self, analyzer, non_compliant_text):
        data = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US").to_dict()
        decoded = json.loads(json.dumps(data))
        assert decoded["overall_risk_level"] == "CRITICAL"
        assert decoded["critical_issues"][0]["category"] == "CONSENT_MANAGEMENT"


class TestScopedRules:

    def test_jurisdiction_scoped_rule(self, corpus, custom_rule_definition, non_compliant_text):
        analyzer = ComplianceAnalyzer(corpus=corpus.with_rules([{**custom_rule_definition, "jurisdiction": "EU"}]))
        us = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], "US")
        eu = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], "EU")
        assert missing_rule_ids(us, "ACME") == []
        assert missing_rule_ids(eu, "ACME") == ["acme-escrow"]

    def test_client_scoped_rule(self, corpus, custom_rule_definition, non_compliant_text):
        analyzer = ComplianceAnalyzer(corpus=corpus.with_rules([{**custom_rule_definition, "client_id": "c-1"}]))
        other = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], "US", client_id="c-2")
        own = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], "US", client_id="c-1")
        assert missing_rule_ids(other, "ACME") == []
        assert missing_rule_ids(own, "ACME") == ["acme-escrow"]

    def test_per_call_custom_rules_do_not_persist(self, analyzer, custom_rule_definition, non_compliant_text):
        analysis = analyzer.analyze_contract(
            non_compliant_text, "nda.txt", ["ACME"], "US", custom_rules=[custom_rule_definition]
        )
        assert missing_rule_ids(analysis, "ACME") == ["acme-escrow"]
        assert "acme-escrow" not in analyzer.corpus

    def test_inactive_rules_still_counted(self, corpus, custom_rule_definition, non_compliant_text):
        analyzer = ComplianceAnalyzer(corpus=corpus.with_rules([
            custom_rule_definition,
            {**custom_rule_definition, "id": "acme-inactive", "is_active": False},
        ]))
        score = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], "US").score_for("ACME")
        # base 50 (1 of 2 rules violated), penalty 8, CUSTOM weight 0.5
        assert score.overall_score == pytest.approx(21.0)


class TestConfiguration:

    def test_configuration_thresholds(self, analyzer, gdpr_rights_text):
        default = analyzer.analyze_contract(gdpr_rights_text, "dpa.txt", ["GDPR"], "US")
        lenient = ComplianceConfiguration(
            id="org-1",
            risk_thresholds=RiskThresholds(low=10, medium=5, high=2, critical=0),
        )
        analysis = analyzer.analyze_contract(gdpr_rights_text, "dpa.txt", ["GDPR"], configuration=lenient)
        assert analysis.overall_compliance_score == pytest.approx(default.overall_compliance_score)
        assert analysis.overall_risk_level == RiskLevel.LOW

    def test_configuration_without_thresholds_uses_settings(self, non_compliant_text):
        analyzer = ComplianceAnalyzer(
            settings=Settings(risk_threshold_low=2, risk_threshold_medium=1, risk_threshold_high=0)
        )
        assert analyzer.scorer.thresholds == RiskThresholds(low=2, medium=1, high=0)

        configuration = ComplianceConfiguration(id="org-1")
        assert configuration.risk_thresholds is None
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], configuration=configuration)
        assert analysis.overall_risk_level != RiskLevel.CRITICAL
        assert analysis.overall_risk_level == analyzer.scorer.classify(analysis.overall_compliance_score)

    def test_configuration_custom_rules(self, analyzer, custom_rule_definition, non_compliant_text):
        configuration = ComplianceConfiguration(
            id="org-1", jurisdiction="EU", custom_rules=[custom_rule_definition]
        )
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["ACME"], configuration=configuration)
        assert analysis.jurisdiction == "EU"
        assert missing_rule_ids(analysis, "ACME") == ["acme-escrow"]

    def test_with_thresholds(self, analyzer):
        strict = analyzer.with_thresholds({"LOW": 99, "MEDIUM": 95, "HIGH": 91})
        assert strict.scorer.classify(92) == RiskLevel.HIGH
        assert strict.corpus is analyzer.corpus

    def test_custom_rules_path_setting(self, tmp_path, monkeypatch, custom_rule_definition):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([{**custom_rule_definition, "category": "INTELLECTUAL_PROPERTY",
                                     "risk_level": "HIGH"}]))
        monkeypatch.setenv("CUSTOM_RULES_PATH", str(path))
        assert "acme-escrow" in ComplianceAnalyzer().corpus


class TestRuleManagement:

    def test_add_custom_rule(self, analyzer, custom_rule_definition):
        rule = analyzer.add_custom_rule(custom_rule_definition)
        assert analyzer.get_rules_by_framework("ACME") == [rule]

    def test_update_rule(self, analyzer):
        analyzer.update_rule("soc2-availability", weight=0.9)
        analysis = analyzer.analyze_contract("Nothing here.", "x.txt", ["SOC2"], "US")
        assert "soc2-availability" in missing_rule_ids(analysis, "SOC2")

    def test_delete_rule(self, analyzer):
        analyzer.delete_rule("gdpr-cross-border")
        assert "gdpr-cross-border" not in analyzer.corpus
        with pytest.raises(RuleNotFoundError):
            analyzer.delete_rule("gdpr-cross-border")

    def test_rules_by_category(self, analyzer):
        rules = analyzer.get_rules_by_category(ClauseCategory.FINANCIAL_REPORTING)
        assert [r.id for r in rules] == ["sox-financial-reporting"]

    def test_analysis_snapshot_unaffected_by_updates(self, corpus, non_compliant_text):
        analyzer = ComplianceAnalyzer(corpus=corpus)
        snapshot = analyzer.corpus
        analyzer.delete_rule("gdpr-lawful-basis")
        analysis = analyzer.analyze_contract(non_compliant_text, "nda.txt", ["GDPR"], "US", corpus=snapshot)
        assert "gdpr-lawful-basis" in missing_rule_ids(analysis)

    def test_concurrent_rule_additions(self, analyzer, custom_rule_definition):
        def add(i):
            analyzer.add_custom_rule({**custom_rule_definition, "id": f"acme-{i}"})

        threads = [threading.Thread(target=add, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(analyzer.get_rules_by_framework("ACME")) == 20
        assert isinstance(analyzer.corpus, RuleCorpus)
