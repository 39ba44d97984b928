"""
Immutable rule corpus.

A RuleCorpus is a validated, read-only catalog of compliance rules. It is
passed explicitly into each analysis so that concurrent analyses never
share mutable rule state; "mutations" return a new corpus.
"""

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from contract_compliance.exceptions import RuleNotFoundError, RuleValidationError
from contract_compliance.models.compliance import ClauseCategory, ComplianceRule, utcnow
from contract_compliance.rules.frameworks import ALL_COMPLIANCE_RULES

logger = structlog.get_logger(__name__)


def build_rule(definition: Mapping[str, Any] | ComplianceRule) -> ComplianceRule:
    """
    Validate a raw rule definition.

    Raises:
        RuleValidationError: if the definition is malformed, e.g. an
            unparsable pattern or a weight outside [0, 1].
    """
    if isinstance(definition, ComplianceRule):
        return definition
    try:
        return ComplianceRule.model_validate(dict(definition))
    except ValidationError as e:
        rule_id = definition.get("id") if isinstance(definition, Mapping) else None
        raise RuleValidationError(
            message=f"Invalid rule definition: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
            rule_id=rule_id,
        ) from e


class RuleCorpus:
    """Validated, immutable collection of compliance rules."""

    def __init__(self, rules: Iterable[ComplianceRule | Mapping[str, Any]] = ()):
        built = tuple(build_rule(r) for r in rules)

        by_id: dict[str, ComplianceRule] = {}
        for rule in built:
            if rule.id in by_id:
                raise RuleValidationError(
                    message="Duplicate rule id in corpus",
                    rule_id=rule.id,
                )
            by_id[rule.id] = rule

        self._rules = built
        self._by_id = by_id

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def default(cls, custom_rules: Iterable[ComplianceRule | Mapping[str, Any]] = ()) -> "RuleCorpus":
        """Corpus of built-in framework rules plus optional custom rules."""
        return cls([*ALL_COMPLIANCE_RULES, *custom_rules])

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[Mapping[str, Any]],
        include_builtin: bool = True,
    ) -> "RuleCorpus":
        """Build a corpus from raw rule dictionaries."""
        base = list(ALL_COMPLIANCE_RULES) if include_builtin else []
        corpus = cls([*base, *definitions])
        logger.info("rule_corpus_loaded", rules=len(corpus), builtin=include_builtin)
        return corpus

    @classmethod
    def from_json_file(cls, path: str | Path, include_builtin: bool = True) -> "RuleCorpus":
        """
        Load custom rule definitions from a JSON file.

        The file holds either a list of rule objects or an object with a
        ``rules`` list.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Rule file not found: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise RuleValidationError(
                message=f"Rule file is not valid JSON: {e}",
                details={"path": str(path)},
            ) from e

        if isinstance(data, dict):
            data = data.get("rules", [])
        if not isinstance(data, list):
            raise RuleValidationError(
                message="Rule file must contain a list of rules",
                details={"path": str(path)},
            )

        return cls.from_definitions(data, include_builtin=include_builtin)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def rules(self) -> tuple[ComplianceRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[ComplianceRule]:
        return iter(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def get(self, rule_id: str) -> ComplianceRule:
        """Get a rule by id."""
        rule = self._by_id.get(rule_id)
        if rule is None:
            raise RuleNotFoundError(message=f"Rule not found: {rule_id}", rule_id=rule_id)
        return rule

    def for_framework(self, framework: str) -> list[ComplianceRule]:
        """All rules registered for a framework, active or not."""
        framework = getattr(framework, "value", framework)
        return [r for r in self._rules if r.framework == framework]

    def for_category(self, category: ClauseCategory | str) -> list[ComplianceRule]:
        category = ClauseCategory(category)
        return [r for r in self._rules if r.category == category]

    def frameworks(self) -> list[str]:
        """Frameworks with at least one rule, in first-seen order."""
        return list(dict.fromkeys(r.framework for r in self._rules))

    def rule_count(self, framework: str) -> int:
        return len(self.for_framework(framework))

    def applicable_rules(
        self,
        framework: str,
        jurisdiction: str | None,
        client_id: str | None = None,
    ) -> list[ComplianceRule]:
        """Active rules in scope for a framework, jurisdiction and client."""
        framework = getattr(framework, "value", framework)
        return [r for r in self._rules if r.applies_to(framework, jurisdiction, client_id)]

    # =========================================================================
    # Copy-on-write updates
    # =========================================================================

    def with_rules(self, rules: Iterable[ComplianceRule | Mapping[str, Any]]) -> "RuleCorpus":
        """Return a new corpus with additional rules appended."""
        rules = list(rules)
        if not rules:
            return self
        return RuleCorpus([*self._rules, *rules])

    def with_rule_updated(self, rule_id: str, **changes: Any) -> "RuleCorpus":
        """Return a new corpus with one rule replaced by an updated copy."""
        current = self.get(rule_id)
        updated = build_rule({**current.model_dump(), **changes, "updated_at": utcnow()})
        return RuleCorpus([updated if r.id == rule_id else r for r in self._rules])

    def without_rule(self, rule_id: str) -> "RuleCorpus":
        """Return a new corpus without the given rule."""
        self.get(rule_id)
        return RuleCorpus([r for r in self._rules if r.id != rule_id])
