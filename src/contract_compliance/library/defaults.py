"""Sample clauses seeded into the default public library."""

from contract_compliance.models.clause import ClauseStatus
from contract_compliance.models.compliance import ClauseCategory, RiskLevel

DEFAULT_LIBRARY_NAME = "Default Clause Library"
DEFAULT_LIBRARY_DESCRIPTION = "Standard legal clauses for common contract types"
DEFAULT_FIRM_ID = "default"


SAMPLE_CLAUSES = [
    {
        "title": "Data Protection Clause (GDPR)",
        "description": "Comprehensive data protection clause compliant with GDPR",
        "category": ClauseCategory.DATA_PROTECTION,
        "content": (
            "The Processor shall process Personal Data only on documented instructions "
            "from the Controller, including with regard to transfers of Personal Data to "
            "a third country or an international organisation, unless required to do so "
            "by Union or Member State law to which the Processor is subject."
        ),
        "tags": ["GDPR", "data protection", "privacy", "EU"],
        "status": ClauseStatus.APPROVED,
        "risk_level": RiskLevel.LOW,
        "compliance_frameworks": ["GDPR"],
        "jurisdiction": "EU",
        "is_public": True,
        "metadata": {"regulatory_references": ["GDPR Article 28"]},
    },
    {
        "title": "Limitation of Liability",
        "description": "Standard limitation of liability clause",
        "category": ClauseCategory.LIABILITY_LIMITATION,
        "content": (
            "IN NO EVENT SHALL EITHER PARTY BE LIABLE FOR ANY INDIRECT, INCIDENTAL, "
            "SPECIAL, CONSEQUENTIAL, OR PUNITIVE DAMAGES, INCLUDING WITHOUT LIMITATION, "
            "LOSS OF PROFITS, DATA, USE, GOODWILL, OR OTHER INTANGIBLE LOSSES, RESULTING "
            "FROM YOUR USE OF THE SERVICE."
        ),
        "tags": ["liability", "limitation", "damages", "standard"],
        "status": ClauseStatus.APPROVED,
        "risk_level": RiskLevel.MEDIUM,
        "compliance_frameworks": [],
        "jurisdiction": "US",
        "is_public": True,
    },
]
