"""
Contract Compliance: rule-based compliance scoring and clause suggestions

Evaluates free-form contract text against regulatory framework rules
(GDPR, HIPAA, SOX, ...) and suggests improved clauses from a template
library.
"""

__version__ = "0.1.0"

from contract_compliance.config import get_settings

__all__ = ["get_settings", "__version__"]
