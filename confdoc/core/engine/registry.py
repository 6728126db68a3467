"""
Definition registry — every record known to the current build.

Registration overwrites on redeclare and never prunes.  A registry is
created empty at the start of a build and discarded with it; it is
owned by the ResolutionDriver, not held in module state.
"""

from __future__ import annotations

import logging

from confdoc.core.engine.locking import RWLock
from confdoc.core.models.record import RecordDefinition

logger = logging.getLogger(__name__)


class DefinitionRegistry:
    """Record name → RecordDefinition, guarded by a readers–writer lock."""

    def __init__(self) -> None:
        self._records: dict[str, RecordDefinition] = {}
        self._lock = RWLock()

    def register(self, record: RecordDefinition) -> None:
        """Insert or overwrite a record definition."""
        with self._lock.write_locked():
            if record.name in self._records:
                logger.warning("Overwriting existing record definition: %s", record.name)
            self._records[record.name] = record
        logger.debug("Registered record: %s (%d fields)", record.name, len(record.fields))

    def lookup(self, names: list[str]) -> dict[str, RecordDefinition | None]:
        """Look up several records under a single read lock."""
        with self._lock.read_locked():
            return {name: self._records.get(name) for name in names}

    def names(self) -> list[str]:
        """All registered record names, in registration order."""
        with self._lock.read_locked():
            return list(self._records)

    def __contains__(self, name: object) -> bool:
        with self._lock.read_locked():
            return name in self._records

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._records)
