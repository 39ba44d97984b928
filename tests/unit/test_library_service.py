"""Tests for contract_compliance/library/service.py — clause libraries, search and usage."""

import pytest

from contract_compliance.exceptions import LibraryNotFoundError, TemplateNotFoundError
from contract_compliance.library.repository import InMemoryLibraryRepository
from contract_compliance.library.service import ClauseLibraryService, get_clause_library_service
from contract_compliance.models.clause import (
    ClauseSearchFilters,
    ClauseStatus,
    ClauseTemplate,
    Complexity,
    SmartSuggestionRequest,
)
from contract_compliance.models.compliance import ClauseCategory, RiskLevel


@pytest.fixture
def default_library(service):
    return service.get_library(service.default_library_id)


@pytest.fixture
def firm_library(service):
    return service.create_library("Firm Clauses", "Clauses for one firm", "firm-1")


def template_data(**kwargs):
    data = {
        "title": "Confidentiality",
        "description": "Mutual confidentiality obligations",
        "category": ClauseCategory.CONFIDENTIALITY,
        "content": "Each party shall keep the other party's Confidential Information secret for 5 years.",
        "tags": ["nda"],
        "compliance_frameworks": ["SOC2"],
    }
    data.update(kwargs)
    return data


class TestDefaultLibrary:

    def test_seeded(self, default_library):
        assert default_library.name == "Default Clause Library"
        assert default_library.firm_id == "default"
        assert default_library.is_public
        assert default_library.total_clauses == 2

    def test_categories(self, default_library):
        assert default_library.categories == [
            ClauseCategory.DATA_PROTECTION, ClauseCategory.LIABILITY_LIMITATION,
        ]

    def test_derived_metadata(self, default_library):
        gdpr = default_library.clauses[0]
        assert gdpr.metadata.word_count == len(gdpr.content.split())
        assert gdpr.metadata.complexity == Complexity.MODERATE
        assert gdpr.metadata.regulatory_references == ["GDPR Article 28"]

    def test_auto_tags(self, default_library):
        gdpr, liability = default_library.clauses
        assert gdpr.tags == ["GDPR", "data protection", "privacy", "EU", "data-protection"]
        assert "liability-limitation" in liability.tags

    def test_seeding_disabled(self, monkeypatch):
        monkeypatch.setenv("SEED_DEFAULT_LIBRARY", "false")
        service = ClauseLibraryService()
        assert service.default_library_id is None
        assert service.list_libraries() == []


class TestLibraries:

    def test_create_and_get(self, service, firm_library):
        fetched = service.get_library(firm_library.id)
        assert fetched.name == "Firm Clauses"
        assert fetched.total_clauses == 0
        assert fetched.settings.allow_public_sharing is False

    def test_unknown_library(self, service):
        with pytest.raises(LibraryNotFoundError) as exc_info:
            service.get_library("missing")
        assert exc_info.value.library_id == "missing"

    def test_list_for_firm_includes_public(self, service, firm_library):
        ids = {lib.id for lib in service.list_libraries("firm-1")}
        assert ids == {firm_library.id, service.default_library_id}

    def test_list_for_firm_without_public(self, service, firm_library):
        assert [lib.id for lib in service.list_libraries("firm-1", include_public=False)] == [firm_library.id]

    def test_returned_library_is_a_copy(self, service, default_library):
        default_library.clauses.clear()
        assert service.get_library(service.default_library_id).total_clauses == 2


class TestAddTemplate:

    def test_assigns_identity(self, service, firm_library):
        template = service.add_clause_template(firm_library.id, template_data(id="caller-id", usage_count=9))
        assert template.id != "caller-id"
        assert template.usage_count == 0
        assert template.firm_id == "firm-1"

    def test_library_updated(self, service, firm_library):
        service.add_clause_template(firm_library.id, template_data())
        library = service.get_library(firm_library.id)
        assert library.total_clauses == 1
        assert library.categories == [ClauseCategory.CONFIDENTIALITY]
        assert library.last_updated >= firm_library.last_updated

    def test_accepts_model(self, service, firm_library):
        template = service.add_clause_template(firm_library.id, ClauseTemplate(**template_data()))
        assert service.get_template(template.id).title == "Confidentiality"

    def test_unknown_library(self, service):
        with pytest.raises(LibraryNotFoundError):
            service.add_clause_template("missing", template_data())

    def test_unknown_template(self, service):
        with pytest.raises(TemplateNotFoundError):
            service.get_template("missing")


class TestUpdateTemplate:

    def test_content_change_records_version(self, service, firm_library):
        template = service.add_clause_template(firm_library.id, template_data())
        updated = service.update_template(
            template.id, author="alice", changes="Extend term", content="Each party shall keep it secret for 7 years."
        )
        assert updated.current_version == "1.1"
        assert updated.alternative_versions[0].content == template.content
        assert updated.alternative_versions[0].author == "alice"
        assert updated.metadata.word_count == 9

    def test_metadata_only_change_no_version(self, service, firm_library):
        template = service.add_clause_template(firm_library.id, template_data())
        updated = service.update_template(template.id, author="alice", status=ClauseStatus.APPROVED)
        assert updated.status == ClauseStatus.APPROVED
        assert updated.alternative_versions == []

    def test_version_control_off(self, service, firm_library):
        library = service.get_library(firm_library.id)
        library.settings.version_control = False
        service.libraries.put(library)
        template = service.add_clause_template(firm_library.id, template_data())
        updated = service.update_template(template.id, author="bob", content="New wording.")
        assert updated.alternative_versions == []

    def test_rejects_unknown_field(self, service, firm_library):
        template = service.add_clause_template(firm_library.id, template_data())
        with pytest.raises(ValueError):
            service.update_template(template.id, author="bob", usage_count=100)

    def test_unknown_template(self, service):
        with pytest.raises(TemplateNotFoundError):
            service.update_template("missing", author="bob", title="x")


class TestSearch:

    def test_all_terms_must_match(self, service):
        results = service.search_clauses(service.default_library_id, "processor personal")
        assert [c.title for c in results] == ["Data Protection Clause (GDPR)"]
        assert service.search_clauses(service.default_library_id, "processor damages") == []

    def test_matches_tags(self, service):
        results = service.search_clauses(service.default_library_id, "privacy")
        assert [c.title for c in results] == ["Data Protection Clause (GDPR)"]

    def test_category_filter(self, service):
        filters = ClauseSearchFilters(categories=[ClauseCategory.LIABILITY_LIMITATION])
        results = service.search_clauses(service.default_library_id, "", filters)
        assert [c.title for c in results] == ["Limitation of Liability"]

    def test_framework_and_risk_filters(self, service):
        filters = ClauseSearchFilters(compliance_frameworks=["GDPR", "HIPAA"], risk_level=[RiskLevel.LOW])
        assert len(service.search_clauses(service.default_library_id, "", filters)) == 1
        filters = ClauseSearchFilters(risk_level=[RiskLevel.CRITICAL])
        assert service.search_clauses(service.default_library_id, "", filters) == []

    def test_jurisdiction_and_public_filters(self, service):
        filters = ClauseSearchFilters(jurisdiction="EU", is_public=True)
        results = service.search_clauses(service.default_library_id, "", filters)
        assert [c.jurisdiction for c in results] == ["EU"]

    def test_ordered_by_usage(self, service, default_library):
        liability = default_library.clauses[1]
        service.track_usage(liability.id, "contract-1", "MSA", "alice")
        results = service.search_clauses(service.default_library_id)
        assert results[0].id == liability.id

    def test_unknown_library(self, service):
        with pytest.raises(LibraryNotFoundError):
            service.search_clauses("missing", "data")


class TestUsage:

    def test_track_usage_increments_count(self, service, default_library):
        gdpr = default_library.clauses[0]
        usage = service.track_usage(gdpr.id, "contract-1", "DPA", "alice", context="Annex 2")
        assert usage.clause_id == gdpr.id
        assert service.get_template(gdpr.id).usage_count == 1

    def test_track_usage_unknown_template(self, service):
        with pytest.raises(TemplateNotFoundError):
            service.track_usage("missing", "contract-1", "DPA", "alice")

    def test_analytics_none_when_unused(self, service, default_library):
        assert service.get_clause_analytics(default_library.clauses[0].id) is None

    def test_analytics(self, service, default_library):
        gdpr = default_library.clauses[0]
        service.track_usage(gdpr.id, "contract-1", "DPA", "alice")
        service.track_usage(gdpr.id, "contract-1", "DPA", "bob", modifications="Jurisdiction updated")
        service.track_usage(gdpr.id, "contract-2", "MSA", "alice", modifications="Jurisdiction updated")

        analytics = service.get_clause_analytics(gdpr.id)
        assert analytics.total_usage == 3
        assert analytics.unique_contracts == 2
        assert analytics.most_common_modifications == ["Jurisdiction updated"]
        assert analytics.usage_by_category == {"DATA_PROTECTION": 3}
        assert analytics.usage_by_firm == {"default": 3}
        assert analytics.performance_metrics.active_rate == 1.0
        assert analytics.performance_metrics.modification_rate == pytest.approx(2 / 3)


class TestSuggestionsAndComparison:

    def test_generate_smart_suggestions(self, service):
        request = SmartSuggestionRequest(
            original_clause="The vendor shall keep data safe.",
            category=ClauseCategory.DATA_PROTECTION,
            compliance_frameworks=["GDPR"],
            desired_improvements=["compliance"],
        )
        suggestions = service.generate_smart_suggestions(request, service.default_library_id)
        assert [s.confidence for s in suggestions] == [0.9]

    def test_unknown_library(self, service):
        request = SmartSuggestionRequest(original_clause="x", category=ClauseCategory.CUSTOM)
        with pytest.raises(LibraryNotFoundError):
            service.generate_smart_suggestions(request, "missing")

    def test_compare_clauses(self, service):
        comparison = service.compare_clauses("Supplier delivers goods.", "Supplier shall deliver goods.")
        assert comparison.overall_score > 0.5


class TestServiceSingleton:

    def test_cached(self):
        assert get_clause_library_service() is get_clause_library_service()

    def test_custom_repository(self):
        repository = InMemoryLibraryRepository()
        service = ClauseLibraryService(libraries=repository)
        assert len(repository) == 1
        assert service.libraries is repository
