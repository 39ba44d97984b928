"""Shared pytest fixtures for the contract compliance test suite."""

import pytest
import structlog

from contract_compliance.compliance.analyzer import ComplianceAnalyzer
from contract_compliance.config import get_settings
from contract_compliance.library.service import ClauseLibraryService, get_clause_library_service
from contract_compliance.models.compliance import ClauseCategory, Framework, RiskLevel
from contract_compliance.rules.corpus import RuleCorpus


# ---------------------------------------------------------------------------
# Singleton cache clearing (autouse)
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clear_singletons():
    """Clear all @lru_cache singletons between tests."""
    get_settings.cache_clear()
    get_clause_library_service.cache_clear()
    yield
    get_settings.cache_clear()
    get_clause_library_service.cache_clear()
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Sample texts
# ---------------------------------------------------------------------------

NON_COMPLIANT_TEXT = "This agreement contains no data handling or rights provisions."

GDPR_RIGHTS_TEXT = (
    "The Processor shall honour the right to access, the right to rectification, "
    "the right to erasure and data portability requests from data subjects. "
    "The lawful basis for processing is performance of this agreement. "
    "Personal data shall be kept for 3 years."
)


@pytest.fixture
def non_compliant_text():
    return NON_COMPLIANT_TEXT


@pytest.fixture
def gdpr_rights_text():
    return GDPR_RIGHTS_TEXT


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def corpus():
    return RuleCorpus.default()


@pytest.fixture
def analyzer(corpus):
    return ComplianceAnalyzer(corpus=corpus)


@pytest.fixture
def service():
    """Clause library service seeded with the default library."""
    return ClauseLibraryService()


@pytest.fixture
def custom_rule_definition():
    """A valid raw rule definition for a custom framework."""
    return {
        "id": "acme-escrow",
        "framework": "ACME",
        "category": ClauseCategory.INTELLECTUAL_PROPERTY,
        "name": "Source Code Escrow",
        "description": "Contract must provide for source code escrow",
        "risk_level": RiskLevel.HIGH,
        "keywords": ["escrow"],
        "patterns": [r"source\s+code\s+escrow"],
        "weight": 0.9,
    }


@pytest.fixture
def gdpr_framework():
    return Framework.GDPR.value
