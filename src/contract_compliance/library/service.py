"""
Clause library service.

Manages clause libraries and templates, tracks template usage and
produces analytics, smart suggestions and clause comparisons.
"""

import threading
from collections import Counter
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import structlog

from contract_compliance.config import Settings, get_settings
from contract_compliance.exceptions import LibraryNotFoundError, TemplateNotFoundError
from contract_compliance.library.comparator import ClauseComparator
from contract_compliance.library.defaults import (
    DEFAULT_FIRM_ID,
    DEFAULT_LIBRARY_DESCRIPTION,
    DEFAULT_LIBRARY_NAME,
    SAMPLE_CLAUSES,
)
from contract_compliance.library.repository import (
    InMemoryLibraryRepository,
    InMemoryUsageRepository,
    LibraryRepository,
    UsageRepository,
)
from contract_compliance.library.similarity import SimilarityMatcher
from contract_compliance.library.suggestions import SuggestionGenerator
from contract_compliance.models.clause import (
    ClauseAnalytics,
    ClauseComparison,
    ClauseLibrary,
    ClauseMetadata,
    ClauseSearchFilters,
    ClauseSuggestion,
    ClauseTemplate,
    ClauseUsage,
    ClauseVersion,
    LibrarySettings,
    PerformanceMetrics,
    SmartSuggestionRequest,
)
from contract_compliance.models.compliance import utcnow

logger = structlog.get_logger(__name__)


# Fields assigned by the service, never taken from caller input
_SERVICE_FIELDS = ("id", "created_at", "last_modified", "usage_count", "alternative_versions")

# Fields update_template accepts
UPDATABLE_FIELDS = frozenset({
    "title", "description", "content", "tags", "status", "risk_level",
    "compliance_frameworks", "jurisdiction", "language", "is_public", "client_id",
})


class ClauseLibraryService:
    """
    Service for clause libraries.

    Reads work on copies handed out by the repository. Mutations
    (adding or updating templates, tracking usage) are serialized by a
    single lock around each read-modify-write of a library.
    """

    def __init__(
        self,
        libraries: LibraryRepository | None = None,
        usage: UsageRepository | None = None,
        matcher: SimilarityMatcher | None = None,
        comparator: ClauseComparator | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.libraries = libraries if libraries is not None else InMemoryLibraryRepository()
        self.usage = usage if usage is not None else InMemoryUsageRepository()
        self.matcher = matcher or SimilarityMatcher(self.settings.similarity_threshold)
        self.generator = SuggestionGenerator(
            self.matcher, self.settings.template_suggestion_threshold
        )
        self.comparator = comparator or ClauseComparator()
        self._lock = threading.RLock()

        self.default_library_id: str | None = None
        if self.settings.seed_default_library:
            self.default_library_id = self._seed_default_library().id

    def _seed_default_library(self) -> ClauseLibrary:
        library = self.create_library(
            DEFAULT_LIBRARY_NAME,
            DEFAULT_LIBRARY_DESCRIPTION,
            DEFAULT_FIRM_ID,
            is_public=True,
        )
        for clause in SAMPLE_CLAUSES:
            self.add_clause_template(library.id, clause)
        return self.get_library(library.id)

    # =========================================================================
    # Libraries
    # =========================================================================

    def create_library(
        self,
        name: str,
        description: str,
        firm_id: str,
        is_public: bool = False,
    ) -> ClauseLibrary:
        """Create an empty clause library."""
        library = ClauseLibrary(
            name=name,
            description=description,
            firm_id=firm_id,
            is_public=is_public,
            settings=LibrarySettings(allow_public_sharing=is_public),
        )
        self.libraries.put(library)

        logger.info("library_created", library_id=library.id, firm_id=firm_id, is_public=is_public)
        return library

    def get_library(self, library_id: str) -> ClauseLibrary:
        library = self.libraries.get(library_id)
        if library is None:
            raise LibraryNotFoundError(
                message=f"Library not found: {library_id}",
                library_id=library_id,
            )
        return library

    def list_libraries(self, firm_id: str | None = None, include_public: bool = True) -> list[ClauseLibrary]:
        """Libraries owned by a firm, plus public ones if requested."""
        libraries = self.libraries.list()
        if firm_id is None:
            return libraries
        return [
            lib for lib in libraries
            if lib.firm_id == firm_id or (include_public and lib.is_public)
        ]

    # =========================================================================
    # Templates
    # =========================================================================

    def add_clause_template(
        self,
        library_id: str,
        template: ClauseTemplate | Mapping[str, Any],
    ) -> ClauseTemplate:
        """
        Add a template to a library.

        Identity, timestamps and usage count are assigned here. Word count
        and complexity are derived from the content, and framework and
        category tags are added when the library auto-tags.

        Raises:
            LibraryNotFoundError: if the library does not exist.
        """
        with self._lock:
            library = self.get_library(library_id)
            clause = self._build_template(library, template)

            library.clauses.append(clause)
            if clause.category not in library.categories:
                library.categories.append(clause.category)
            library.last_updated = utcnow()
            self.libraries.put(library)

        logger.info(
            "clause_template_added",
            library_id=library_id,
            template_id=clause.id,
            category=clause.category.value,
        )
        return clause

    def _build_template(
        self,
        library: ClauseLibrary,
        template: ClauseTemplate | Mapping[str, Any],
    ) -> ClauseTemplate:
        if isinstance(template, ClauseTemplate):
            data = template.model_dump()
        else:
            data = dict(template)
        for key in _SERVICE_FIELDS:
            data.pop(key, None)

        metadata = data.pop("metadata", None) or {}
        if isinstance(metadata, ClauseMetadata):
            metadata = metadata.model_dump()
        metadata = {k: v for k, v in metadata.items() if k not in ("word_count", "complexity")}

        data["firm_id"] = data.get("firm_id") or library.firm_id
        clause = ClauseTemplate(
            **data,
            metadata=ClauseMetadata.for_content(data.get("content") or "", **metadata),
        )

        if library.settings.auto_tagging:
            clause.tags = auto_tag(clause)
        return clause

    def _locate(self, template_id: str) -> tuple[ClauseLibrary, ClauseTemplate]:
        for library in self.libraries.list():
            clause = library.find_clause(template_id)
            if clause is not None:
                return library, clause
        raise TemplateNotFoundError(
            message=f"Clause template not found: {template_id}",
            template_id=template_id,
        )

    def get_template(self, template_id: str) -> ClauseTemplate:
        return self._locate(template_id)[1]

    def update_template(
        self,
        template_id: str,
        author: str,
        changes: str = "",
        **updates: Any,
    ) -> ClauseTemplate:
        """
        Update a template's fields.

        When the content changes and the library keeps version history,
        the previous content is recorded as a ClauseVersion.

        Raises:
            TemplateNotFoundError: if the template does not exist.
            ValueError: if an update names a field that cannot be changed.
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update template fields: {sorted(unknown)}")

        with self._lock:
            library, current = self._locate(template_id)
            data = {**current.model_dump(), **updates, "last_modified": utcnow()}

            content_changed = "content" in updates and updates["content"] != current.content
            if content_changed:
                data["metadata"] = ClauseMetadata.for_content(
                    updates["content"],
                    **current.metadata.model_dump(exclude={"word_count", "complexity"}),
                )
                if library.settings.version_control:
                    data["alternative_versions"] = [
                        *current.alternative_versions,
                        ClauseVersion(
                            version=current.current_version,
                            content=current.content,
                            changes=changes,
                            author=author,
                        ),
                    ]

            updated = ClauseTemplate.model_validate(data)
            if library.settings.auto_tagging:
                updated.tags = auto_tag(updated)

            library.clauses = [updated if c.id == template_id else c for c in library.clauses]
            if updated.category not in library.categories:
                library.categories.append(updated.category)
            library.last_updated = utcnow()
            self.libraries.put(library)

        logger.info(
            "clause_template_updated",
            template_id=template_id,
            fields=sorted(updates),
            version=updated.current_version,
        )
        return updated

    # =========================================================================
    # Search
    # =========================================================================

    def search_clauses(
        self,
        library_id: str,
        query: str = "",
        filters: ClauseSearchFilters | None = None,
    ) -> list[ClauseTemplate]:
        """
        Search a library's templates.

        Every whitespace separated query term must occur (case-insensitively)
        in the title, description, content or a tag. Results are ordered by
        usage count, then most recently modified.
        """
        library = self.get_library(library_id)
        filters = filters or ClauseSearchFilters()
        terms = query.lower().split()

        results = [
            clause for clause in library.clauses
            if matches_query(clause, terms) and filters.matches(clause)
        ]
        results.sort(key=lambda c: (c.usage_count, c.last_modified), reverse=True)

        logger.debug("clauses_searched", library_id=library_id, query=query, results=len(results))
        return results

    # =========================================================================
    # Usage and analytics
    # =========================================================================

    def track_usage(
        self,
        clause_id: str,
        contract_id: str,
        contract_name: str,
        used_by: str,
        context: str = "",
        modifications: str | None = None,
    ) -> ClauseUsage:
        """
        Record that a template was used in a contract.

        Raises:
            TemplateNotFoundError: if the template does not exist.
        """
        with self._lock:
            library, clause = self._locate(clause_id)

            usage = ClauseUsage(
                clause_id=clause_id,
                contract_id=contract_id,
                contract_name=contract_name,
                used_by=used_by,
                context=context,
                modifications=modifications,
            )
            self.usage.append(usage)

            now = utcnow()
            clause.usage_count += 1
            clause.last_modified = now
            library.clauses = [clause if c.id == clause_id else c for c in library.clauses]
            library.last_updated = now
            self.libraries.put(library)

        logger.info(
            "clause_usage_tracked",
            clause_id=clause_id,
            contract_id=contract_id,
            usage_count=clause.usage_count,
        )
        return usage

    def get_clause_analytics(self, clause_id: str) -> ClauseAnalytics | None:
        """Usage analytics for a template, or None if it was never used."""
        usages = self.usage.list_for_clause(clause_id)
        if not usages:
            return None

        library, clause = self._locate(clause_id)
        total = len(usages)
        modified = [u.modifications for u in usages if u.modifications]

        return ClauseAnalytics(
            clause_id=clause_id,
            total_usage=total,
            unique_contracts=len({u.contract_id for u in usages}),
            last_used=max(u.used_at for u in usages),
            most_common_modifications=[m for m, _ in Counter(modified).most_common(3)],
            usage_by_category={clause.category.value: total},
            usage_by_firm={clause.firm_id or library.firm_id: total},
            performance_metrics=PerformanceMetrics(
                active_rate=sum(1 for u in usages if u.is_active) / total,
                modification_rate=len(modified) / total,
            ),
        )

    # =========================================================================
    # Suggestions and comparison
    # =========================================================================

    def generate_smart_suggestions(
        self,
        request: SmartSuggestionRequest,
        library_id: str,
    ) -> list[ClauseSuggestion]:
        """
        Suggest improvements for a clause using a library's templates.

        Raises:
            LibraryNotFoundError: if the library does not exist.
        """
        library = self.get_library(library_id)
        return self.generator.generate(request, library)

    def compare_clauses(self, original_clause: str, suggested_clause: str) -> ClauseComparison:
        return self.comparator.compare(original_clause, suggested_clause)


def matches_query(clause: ClauseTemplate, terms: list[str]) -> bool:
    fields = clause.searchable_fields()
    return all(any(term in f for f in fields) for term in terms)


def auto_tag(clause: ClauseTemplate) -> list[str]:
    """Template tags plus its frameworks and category tag, without duplicates."""
    tags = list(clause.tags)
    seen = {t.lower() for t in tags}
    for tag in [*clause.compliance_frameworks, clause.category.tag]:
        if tag.lower() not in seen:
            tags.append(tag)
            seen.add(tag.lower())
    return tags


@lru_cache()
def get_clause_library_service() -> ClauseLibraryService:
    """Get cached clause library service instance."""
    return ClauseLibraryService()
