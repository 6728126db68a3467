"""
Pending-generation store — requests waiting on flatten dependencies.

Requests are queued per target path in enqueue order.  A sweep offers
every queued request, target by target, to a callback; requests the
callback consumes are dropped, the rest stay queued.  Targets whose
queue empties are removed.  Nothing is ever dropped without being
consumed.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any

from confdoc.core.engine.locking import RWLock
from confdoc.core.models.record import RecordDefinition
from confdoc.core.models.request import GenerationRequest, OutputConfig

logger = logging.getLogger(__name__)


class PendingStore:
    """Target path → ordered list of GenerationRequest."""

    def __init__(self) -> None:
        self._queues: dict[str, list[GenerationRequest]] = {}
        self._lock = RWLock()
        self._sequence = itertools.count(1)

    def enqueue(self, record: RecordDefinition, output: OutputConfig) -> GenerationRequest:
        """Append a request to its target's queue, creating the queue if absent."""
        with self._lock.write_locked():
            request = GenerationRequest(
                record=record,
                output=output,
                sequence=next(self._sequence),
            )
            self._queues.setdefault(output.target, []).append(request)
        return request

    def sweep(self, attempt: Callable[[GenerationRequest], bool]) -> int:
        """Offer every queued request to ``attempt``.

        ``attempt`` returns True when it consumed the request.  The
        exclusive lock is held for the whole sweep.

        Returns:
            Number of requests consumed.
        """
        consumed = 0
        with self._lock.write_locked():
            for target in list(self._queues):
                remaining: list[GenerationRequest] = []
                for request in self._queues[target]:
                    if attempt(request):
                        consumed += 1
                    else:
                        remaining.append(request)
                if remaining:
                    self._queues[target] = remaining
                else:
                    del self._queues[target]
        if consumed:
            logger.debug("Sweep consumed %d pending request(s)", consumed)
        return consumed

    def drain(self) -> list[GenerationRequest]:
        """Remove and return every queued request, oldest first."""
        with self._lock.write_locked():
            requests = [r for queue in self._queues.values() for r in queue]
            self._queues.clear()
        return sorted(requests, key=lambda r: r.sequence)

    def requests(self, target: str | None = None) -> list[GenerationRequest]:
        """Queued requests for one target, or for all targets."""
        with self._lock.read_locked():
            if target is not None:
                return list(self._queues.get(target, []))
            return [r for queue in self._queues.values() for r in queue]

    def __len__(self) -> int:
        with self._lock.read_locked():
            return sum(len(queue) for queue in self._queues.values())

    def to_dict(self) -> dict[str, Any]:
        """Pending requests grouped by target, for diagnostics."""
        with self._lock.read_locked():
            return {
                target: [
                    {
                        "record": r.record.name,
                        "sequence": r.sequence,
                        "format": r.output.format.value,
                        "references": r.record.references(),
                    }
                    for r in queue
                ]
                for target, queue in self._queues.items()
            }
