"""
Domain models — Pydantic types for confdoc.

All models are re-exported here for convenient access:

    from confdoc.core.models import RecordDefinition, FieldRecord, GenerationRequest
"""

from confdoc.core.models.record import (
    CaseStyle,
    FieldAttributes,
    FieldRecord,
    RecordDefinition,
)
from confdoc.core.models.request import (
    Declaration,
    GenerationOutcome,
    GenerationRequest,
    OutcomeStatus,
    OutputConfig,
    OutputFormat,
)

__all__ = [
    # record.py
    "CaseStyle",
    # request.py
    "Declaration",
    "FieldAttributes",
    "FieldRecord",
    "GenerationOutcome",
    "GenerationRequest",
    "OutcomeStatus",
    "OutputConfig",
    "OutputFormat",
    "RecordDefinition",
]
