"""
Resolution driver — order-independent documentation generation.

The build feeds declarations to the driver one at a time, in source
order.  For each one:

    1. ``@register``  → insert into the registry, then sweep every
       pending request; the ones that became resolvable are expanded,
       rendered and written.
    2. ``@generate``  → resolvable now? render and write.  Otherwise
       queue it under its target path until a later registration
       satisfies it.

Requests whose dependencies never show up stay queued; they are not an
error.  ``force_pending()`` renders them with placeholder rows.

Each target document is rewritten wholesale per request, so two
requests sharing a target are last-writer-wins.  The driver logs a
warning when that happens.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from confdoc.core.engine.pending import PendingStore
from confdoc.core.engine.registry import DefinitionRegistry
from confdoc.core.engine.resolver import expand, missing_references
from confdoc.core.models.record import RecordDefinition
from confdoc.core.models.request import (
    Declaration,
    GenerationOutcome,
    GenerationRequest,
    OutputConfig,
)
from confdoc.core.services.document import DocumentError, update_document
from confdoc.core.services.rendering import render

logger = logging.getLogger(__name__)

DocumentWriter = Callable[[Path, str], None]


class ResolutionDriver:
    """Owns the registry and pending store for one build.

    Args:
        registry: Record registry (default: a fresh, empty one).
        pending: Pending-generation store (default: a fresh, empty one).
        root: Directory that relative target paths resolve against
            (default: the current working directory).
        writer: Function that splices rendered content into a target.
    """

    def __init__(
        self,
        registry: DefinitionRegistry | None = None,
        pending: PendingStore | None = None,
        root: Path | None = None,
        writer: DocumentWriter = update_document,
    ):
        self.registry = registry if registry is not None else DefinitionRegistry()
        self.pending = pending if pending is not None else PendingStore()
        self.root = root
        self._writer = writer
        self._written: dict[Path, str] = {}

    # ── Entry points ─────────────────────────────────────────────

    def process(self, declaration: Declaration) -> list[GenerationOutcome]:
        """Handle one declaration: registration first, then its request."""
        outcomes: list[GenerationOutcome] = []
        if declaration.registered:
            outcomes.extend(self.register(declaration.record))
        if declaration.output is not None:
            outcomes.append(self.request(declaration.record, declaration.output))
        return outcomes

    def register(self, record: RecordDefinition) -> list[GenerationOutcome]:
        """Register a record and retry every pending request.

        Returns:
            Outcomes of the pending requests this registration satisfied.
        """
        self.registry.register(record)
        return self._sweep()

    def request(self, record: RecordDefinition, output: OutputConfig) -> GenerationOutcome:
        """Generate now if resolvable, otherwise queue for later."""
        missing = missing_references(record, self.registry)
        if not missing:
            return self._generate(record, output)

        self.pending.enqueue(record, output)
        logger.info(
            "Queued %s → %s (waiting for %s)",
            record.name,
            output.target,
            ", ".join(missing),
        )
        return GenerationOutcome.queued(record.name, output.target, missing)

    def force_pending(self) -> list[GenerationOutcome]:
        """Render every still-pending request, with placeholders for gaps."""
        outcomes = []
        for request in self.pending.drain():
            missing = missing_references(request.record, self.registry)
            logger.warning(
                "Force-rendering %s → %s with unregistered %s",
                request.record.name,
                request.target,
                ", ".join(missing) or "(none)",
            )
            outcomes.append(
                self._generate(request.record, request.output, forced=True, missing=missing)
            )
        return outcomes

    def pending_report(self) -> dict[str, list[str]]:
        """Target path → names of records still waiting on it."""
        report: dict[str, list[str]] = {}
        for request in self.pending.requests():
            report.setdefault(request.target, []).append(request.record.name)
        return report

    # ── Internals ────────────────────────────────────────────────

    def _sweep(self) -> list[GenerationOutcome]:
        outcomes: list[GenerationOutcome] = []

        def attempt(request: GenerationRequest) -> bool:
            if missing_references(request.record, self.registry):
                return False
            outcomes.append(self._generate(request.record, request.output))
            return True

        self.pending.sweep(attempt)
        return outcomes

    def resolve_target(self, target: str) -> Path:
        path = Path(target)
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return path

    def _generate(
        self,
        record: RecordDefinition,
        output: OutputConfig,
        forced: bool = False,
        missing: list[str] | None = None,
    ) -> GenerationOutcome:
        expanded = expand(record, self.registry)
        content = render(expanded, output.format)
        path = self.resolve_target(output.target)

        previous = self._written.get(path)
        if previous is not None and previous != record.name:
            logger.warning(
                "%s overwrites the %s table in %s (one generated table per target)",
                record.name,
                previous,
                path,
            )

        try:
            self._writer(path, content)
        except DocumentError as e:
            logger.error("Cannot generate %s: %s", record.name, e)
            return GenerationOutcome.failed(
                record.name, output.target, str(e), forced=forced, missing=missing or []
            )

        self._written[path] = record.name
        logger.info("Generated %s → %s (%s)", record.name, path, output.format.value)
        return GenerationOutcome.written(
            record.name, output.target, forced=forced, missing=missing or []
        )
