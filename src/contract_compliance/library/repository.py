"""Clause library storage: repository protocols and in-memory implementations."""

import threading
from typing import Protocol

from contract_compliance.models.clause import ClauseLibrary, ClauseUsage


class LibraryRepository(Protocol):
    """Protocol for clause library storage."""

    def get(self, library_id: str) -> ClauseLibrary | None: ...
    def list(self) -> list[ClauseLibrary]: ...
    def put(self, library: ClauseLibrary) -> None: ...
    def __len__(self) -> int: ...


class UsageRepository(Protocol):
    """Protocol for the append-only clause usage log."""

    def append(self, usage: ClauseUsage) -> None: ...
    def list_for_clause(self, clause_id: str) -> list[ClauseUsage]: ...
    def list(self) -> list[ClauseUsage]: ...


class InMemoryLibraryRepository:
    """In-memory library store.

    Libraries are stored as deep copies and handed out as deep copies, so
    callers never share mutable state with the store. Writers replace a
    whole library under the lock.
    """

    def __init__(self):
        self._libraries: dict[str, ClauseLibrary] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._libraries)

    def get(self, library_id: str) -> ClauseLibrary | None:
        with self._lock:
            library = self._libraries.get(library_id)
            return library.model_copy(deep=True) if library else None

    def list(self) -> list[ClauseLibrary]:
        with self._lock:
            return [lib.model_copy(deep=True) for lib in self._libraries.values()]

    def put(self, library: ClauseLibrary) -> None:
        with self._lock:
            self._libraries[library.id] = library.model_copy(deep=True)


class InMemoryUsageRepository:
    """In-memory usage log indexed by clause id."""

    def __init__(self):
        self._usage: dict[str, list[ClauseUsage]] = {}
        self._lock = threading.RLock()

    def append(self, usage: ClauseUsage) -> None:
        with self._lock:
            self._usage.setdefault(usage.clause_id, []).append(usage)

    def list_for_clause(self, clause_id: str) -> list[ClauseUsage]:
        with self._lock:
            return list(self._usage.get(clause_id, []))

    def list(self) -> list[ClauseUsage]:
        with self._lock:
            return [u for entries in self._usage.values() for u in entries]
