"""
Request and outcome models — the generation contract.

A GenerationRequest asks for one record to be rendered into one target
document. A GenerationOutcome reports what happened to it. The driver
returns outcomes for every request it touches; I/O failures are
captured here rather than raised.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from confdoc.core.models.record import RecordDefinition


class OutputFormat(StrEnum):
    """Table layout for a generated document."""

    FLAT = "flat"
    GROUPED = "grouped"


class OutputConfig(BaseModel):
    """Options of a ``@generate(...)`` marker."""

    target: str = Field(min_length=1)
    format: OutputFormat = OutputFormat.FLAT


class GenerationRequest(BaseModel):
    """A record waiting to be rendered into a target document.

    ``sequence`` is the process-wide insertion order; together with the
    target path it identifies the request inside the pending store.
    """

    record: RecordDefinition
    output: OutputConfig
    sequence: int = 0

    @property
    def target(self) -> str:
        return self.output.target


class Declaration(BaseModel):
    """One decorated class found in a source file."""

    record: RecordDefinition
    registered: bool = False
    output: OutputConfig | None = None
    source: str = ""
    lineno: int = 0

    @property
    def location(self) -> str:
        """``path:line`` of the class statement."""
        return f"{self.source}:{self.lineno}"


class OutcomeStatus(StrEnum):
    WRITTEN = "written"
    QUEUED = "queued"
    FAILED = "failed"


class GenerationOutcome(BaseModel):
    """Result of attempting one generation request."""

    record: str
    target: str
    status: OutcomeStatus
    error: str | None = None
    missing: list[str] = Field(default_factory=list)   # unresolved references
    forced: bool = False                               # rendered with placeholders

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED

    @classmethod
    def written(cls, record: str, target: str, **kwargs: Any) -> GenerationOutcome:
        """Create an outcome for a request whose document was updated."""
        return cls(record=record, target=target, status=OutcomeStatus.WRITTEN, **kwargs)

    @classmethod
    def queued(cls, record: str, target: str, missing: list[str]) -> GenerationOutcome:
        """Create an outcome for a request parked in the pending store."""
        return cls(record=record, target=target, status=OutcomeStatus.QUEUED, missing=missing)

    @classmethod
    def failed(cls, record: str, target: str, error: str, **kwargs: Any) -> GenerationOutcome:
        """Create an outcome for a request whose document could not be written."""
        return cls(
            record=record,
            target=target,
            status=OutcomeStatus.FAILED,
            error=error,
            **kwargs,
        )
