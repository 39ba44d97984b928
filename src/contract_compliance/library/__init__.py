"""Clause library: storage, search, suggestions and comparison."""

from .repository import (
    InMemoryLibraryRepository,
    InMemoryUsageRepository,
    LibraryRepository,
    UsageRepository,
)
from .similarity import SimilarityMatcher, extract_keywords, similarity
from .suggestions import SuggestionGenerator
from .comparator import ClauseComparator
from .service import ClauseLibraryService, get_clause_library_service

__all__ = [
    "InMemoryLibraryRepository",
    "InMemoryUsageRepository",
    "LibraryRepository",
    "UsageRepository",
    "SimilarityMatcher",
    "extract_keywords",
    "similarity",
    "SuggestionGenerator",
    "ClauseComparator",
    "ClauseLibraryService",
    "get_clause_library_service",
]
