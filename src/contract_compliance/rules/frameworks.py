"""Built-in compliance rules for supported regulatory frameworks.

Defines the rule catalog plus the severity and framework weights used
when scoring.
"""

from contract_compliance.models.compliance import (
    ClauseCategory,
    ComplianceRule,
    Framework,
    RiskLevel,
)


# === GDPR ===
GDPR_RULES = [
    ComplianceRule(
        id="gdpr-data-subject-rights",
        framework=Framework.GDPR,
        category=ClauseCategory.DATA_PROTECTION,
        name="Data Subject Rights",
        description="Contract must include provisions for data subject rights (access, rectification, erasure, portability)",
        risk_level=RiskLevel.HIGH,
        keywords=["data subject", "right to access", "right to rectification", "right to erasure",
                  "data portability", "consent withdrawal"],
        patterns=[r"right to access", r"right to rectification", r"right to erasure",
                  r"data portability", r"consent withdrawal", r"data subject rights"],
        weight=0.9,
    ),
    ComplianceRule(
        id="gdpr-lawful-basis",
        framework=Framework.GDPR,
        category=ClauseCategory.CONSENT_MANAGEMENT,
        name="Lawful Basis for Processing",
        description="Contract must specify lawful basis for data processing",
        risk_level=RiskLevel.CRITICAL,
        keywords=["lawful basis", "legitimate interest", "consent", "contractual necessity",
                  "legal obligation"],
        patterns=[r"lawful basis", r"legitimate interest", r"contractual necessity",
                  r"legal obligation", r"vital interests"],
        weight=1.0,
    ),
    ComplianceRule(
        id="gdpr-data-retention",
        framework=Framework.GDPR,
        category=ClauseCategory.DATA_RETENTION,
        name="Data Retention Periods",
        description="Contract must specify data retention periods and deletion procedures",
        risk_level=RiskLevel.HIGH,
        keywords=["retention period", "data deletion", "storage limitation", "retention policy"],
        patterns=[r"retention period", r"data deletion", r"storage limitation",
                  r"retention policy", r"data retention"],
        weight=0.8,
    ),
    ComplianceRule(
        id="gdpr-cross-border",
        framework=Framework.GDPR,
        category=ClauseCategory.CROSS_BORDER_TRANSFER,
        name="Cross-Border Data Transfers",
        description="Contract must include safeguards for international data transfers",
        risk_level=RiskLevel.HIGH,
        keywords=["cross-border", "international transfer", "adequacy decision",
                  "standard contractual clauses", "binding corporate rules"],
        patterns=[r"cross-border", r"international transfer", r"adequacy decision",
                  r"standard contractual clauses", r"binding corporate rules", r"sccs"],
        weight=0.9,
    ),
    ComplianceRule(
        id="gdpr-breach-notification",
        framework=Framework.GDPR,
        category=ClauseCategory.BREACH_NOTIFICATION,
        name="Data Breach Notification",
        description="Contract must include data breach notification requirements",
        risk_level=RiskLevel.HIGH,
        keywords=["breach notification", "data breach", "security incident", "72 hours",
                  "supervisory authority"],
        patterns=[r"breach notification", r"data breach", r"security incident", r"72 hours",
                  r"supervisory authority"],
        weight=0.8,
    ),
]

# === HIPAA ===
HIPAA_RULES = [
    ComplianceRule(
        id="hipaa-phi-protection",
        framework=Framework.HIPAA,
        category=ClauseCategory.HEALTHCARE_PRIVACY,
        name="PHI Protection Requirements",
        description="Contract must include specific protections for Protected Health Information",
        risk_level=RiskLevel.CRITICAL,
        keywords=["PHI", "protected health information", "health information", "medical records",
                  "patient data"],
        patterns=[r"protected health information", r"PHI", r"health information",
                  r"medical records", r"patient data"],
        weight=1.0,
    ),
    ComplianceRule(
        id="hipaa-baa-requirement",
        framework=Framework.HIPAA,
        category=ClauseCategory.HEALTHCARE_PRIVACY,
        name="Business Associate Agreement",
        description="Contract must include Business Associate Agreement provisions",
        risk_level=RiskLevel.CRITICAL,
        keywords=["business associate", "BAA", "covered entity", "HIPAA compliance",
                  "healthcare data"],
        patterns=[r"business associate", r"BAA", r"covered entity", r"HIPAA compliance",
                  r"healthcare data"],
        weight=1.0,
    ),
    ComplianceRule(
        id="hipaa-minimum-necessary",
        framework=Framework.HIPAA,
        category=ClauseCategory.HEALTHCARE_PRIVACY,
        name="Minimum Necessary Standard",
        description="Contract must limit access to minimum necessary information",
        risk_level=RiskLevel.HIGH,
        keywords=["minimum necessary", "need to know", "access limitation", "data minimization"],
        patterns=[r"minimum necessary", r"need to know", r"access limitation",
                  r"data minimization"],
        weight=0.8,
    ),
]

# === SOX ===
SOX_RULES = [
    ComplianceRule(
        id="sox-financial-reporting",
        framework=Framework.SOX,
        category=ClauseCategory.FINANCIAL_REPORTING,
        name="Financial Reporting Controls",
        description="Contract must include internal controls for financial reporting",
        risk_level=RiskLevel.CRITICAL,
        keywords=["internal controls", "financial reporting", "audit trail", "documentation",
                  "SOX compliance"],
        patterns=[r"internal controls", r"financial reporting", r"audit trail",
                  r"SOX compliance", r"sarbanes-oxley"],
        weight=1.0,
    ),
    ComplianceRule(
        id="sox-audit-requirements",
        framework=Framework.SOX,
        category=ClauseCategory.AUDIT_COMPLIANCE,
        name="Audit Requirements",
        description="Contract must include audit and review requirements",
        risk_level=RiskLevel.HIGH,
        keywords=["audit", "review", "assessment", "compliance monitoring", "internal audit"],
        patterns=[r"audit requirements", r"compliance monitoring", r"internal audit",
                  r"external audit", r"audit trail"],
        weight=0.9,
    ),
    ComplianceRule(
        id="sox-documentation",
        framework=Framework.SOX,
        category=ClauseCategory.AUDIT_COMPLIANCE,
        name="Documentation Requirements",
        description="Contract must include proper documentation and record-keeping requirements",
        risk_level=RiskLevel.HIGH,
        keywords=["documentation", "record keeping", "evidence", "supporting documents",
                  "retention"],
        patterns=[r"documentation requirements", r"record keeping", r"supporting documents",
                  r"evidence", r"retention"],
        weight=0.8,
    ),
]

# === CCPA ===
CCPA_RULES = [
    ComplianceRule(
        id="ccpa-consumer-rights",
        framework=Framework.CCPA,
        category=ClauseCategory.CONSUMER_RIGHTS,
        name="Consumer Rights",
        description="Contract must include California Consumer Privacy Act consumer rights",
        risk_level=RiskLevel.HIGH,
        keywords=["consumer rights", "opt-out", "do not sell", "personal information", "CCPA"],
        patterns=[r"consumer rights", r"opt-out", r"do not sell", r"personal information",
                  r"CCPA", r"california consumer privacy"],
        weight=0.9,
    ),
    ComplianceRule(
        id="ccpa-disclosure",
        framework=Framework.CCPA,
        category=ClauseCategory.CONSUMER_RIGHTS,
        name="Information Disclosure",
        description="Contract must include proper disclosure of data collection and use",
        risk_level=RiskLevel.HIGH,
        keywords=["disclosure", "data collection", "privacy notice", "transparency",
                  "information practices"],
        patterns=[r"disclosure", r"data collection", r"privacy notice", r"transparency",
                  r"information practices"],
        weight=0.8,
    ),
]

# === ISO 27001 ===
ISO27001_RULES = [
    ComplianceRule(
        id="iso27001-security-policy",
        framework=Framework.ISO27001,
        category=ClauseCategory.SECURITY_REQUIREMENTS,
        name="Information Security Policy",
        description="Contract must include information security policy requirements",
        risk_level=RiskLevel.HIGH,
        keywords=["information security", "security policy", "ISO 27001", "ISMS",
                  "security controls"],
        patterns=[r"information security", r"security policy", r"ISO 27001", r"ISMS",
                  r"security controls"],
        weight=0.9,
    ),
    ComplianceRule(
        id="iso27001-risk-assessment",
        framework=Framework.ISO27001,
        category=ClauseCategory.SECURITY_REQUIREMENTS,
        name="Risk Assessment",
        description="Contract must include risk assessment and management requirements",
        risk_level=RiskLevel.HIGH,
        keywords=["risk assessment", "risk management", "threat analysis",
                  "vulnerability assessment"],
        patterns=[r"risk assessment", r"risk management", r"threat analysis",
                  r"vulnerability assessment"],
        weight=0.8,
    ),
]

# === SOC 2 ===
SOC2_RULES = [
    ComplianceRule(
        id="soc2-availability",
        framework=Framework.SOC2,
        category=ClauseCategory.SECURITY_REQUIREMENTS,
        name="System Availability",
        description="Contract must include system availability and uptime requirements",
        risk_level=RiskLevel.MEDIUM,
        keywords=["availability", "uptime", "system reliability", "service level", "SLA"],
        patterns=[r"availability", r"uptime", r"system reliability", r"service level", r"SLA"],
        weight=0.6,
    ),
    ComplianceRule(
        id="soc2-confidentiality",
        framework=Framework.SOC2,
        category=ClauseCategory.CONFIDENTIALITY,
        name="Confidentiality Controls",
        description="Contract must include confidentiality and data protection controls",
        risk_level=RiskLevel.HIGH,
        keywords=["confidentiality", "data protection", "access controls", "encryption", "SOC 2"],
        patterns=[r"confidentiality", r"data protection", r"access controls", r"encryption",
                  r"SOC 2"],
        weight=0.8,
    ),
]

# === PCI DSS ===
PCI_DSS_RULES = [
    ComplianceRule(
        id="pci-dss-card-data",
        framework=Framework.PCI_DSS,
        category=ClauseCategory.SECURITY_REQUIREMENTS,
        name="Cardholder Data Protection",
        description="Contract must include protection for cardholder data",
        risk_level=RiskLevel.CRITICAL,
        keywords=["cardholder data", "credit card", "payment data", "PCI DSS", "card security"],
        patterns=[r"cardholder data", r"credit card", r"payment data", r"PCI DSS",
                  r"card security"],
        weight=1.0,
    ),
    ComplianceRule(
        id="pci-dss-encryption",
        framework=Framework.PCI_DSS,
        category=ClauseCategory.SECURITY_REQUIREMENTS,
        name="Data Encryption",
        description="Contract must include encryption requirements for sensitive data",
        risk_level=RiskLevel.HIGH,
        keywords=["encryption", "encrypted", "cryptographic", "data security",
                  "secure transmission"],
        patterns=[r"encryption", r"encrypted", r"cryptographic", r"data security",
                  r"secure transmission"],
        weight=0.9,
    ),
]


ALL_COMPLIANCE_RULES: list[ComplianceRule] = [
    *GDPR_RULES,
    *HIPAA_RULES,
    *SOX_RULES,
    *CCPA_RULES,
    *ISO27001_RULES,
    *SOC2_RULES,
    *PCI_DSS_RULES,
]


# Severity weights for the violation penalty
RISK_LEVEL_WEIGHTS = {
    RiskLevel.LOW: 0.2,
    RiskLevel.MEDIUM: 0.5,
    RiskLevel.HIGH: 0.8,
    RiskLevel.CRITICAL: 1.0,
}

# Framework trust weights
FRAMEWORK_WEIGHTS = {
    Framework.GDPR.value: 0.9,
    Framework.HIPAA.value: 0.9,
    Framework.SOX.value: 0.8,
    Framework.CCPA.value: 0.7,
    Framework.PIPEDA.value: 0.7,
    Framework.LGPD.value: 0.7,
    Framework.ISO27001.value: 0.6,
    Framework.SOC2.value: 0.6,
    Framework.PCI_DSS.value: 0.8,
    Framework.CUSTOM.value: 0.5,
}


def get_framework_weight(framework: str) -> float:
    """Trust weight for a framework; unknown frameworks weigh as CUSTOM."""
    framework = getattr(framework, "value", framework)
    return FRAMEWORK_WEIGHTS.get(framework, FRAMEWORK_WEIGHTS[Framework.CUSTOM.value])
