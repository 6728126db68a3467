"""
Resolvability check and flatten expansion.

A record is resolvable when every flattened field refers to a record
already in the registry.  The check is cheap and idempotent, so the
driver simply re-runs it for every pending request on every
registration instead of tracking a dependency graph.

Expansion inlines exactly one level: fields copied in from a referenced
record are not themselves scanned for further flatten attributes.
"""

from __future__ import annotations

from confdoc.core.engine.registry import DefinitionRegistry
from confdoc.core.models.record import FieldRecord, RecordDefinition
from confdoc.core.services.casing import apply_case


def missing_references(record: RecordDefinition, registry: DefinitionRegistry) -> list[str]:
    """Flatten references of ``record`` that the registry does not know yet."""
    refs = record.references()
    if not refs:
        return []
    found = registry.lookup(refs)
    missing: list[str] = []
    for ref in refs:
        if found[ref] is None and ref not in missing:
            missing.append(ref)
    return missing


def is_resolvable(record: RecordDefinition, registry: DefinitionRegistry) -> bool:
    """Whether every flattened field's referenced record is registered."""
    return not missing_references(record, registry)


def expand(record: RecordDefinition, registry: DefinitionRegistry) -> RecordDefinition:
    """Return a copy of ``record`` with flattened fields inlined.

    A flattened field whose reference is not registered (only reachable
    when a pending request is force-rendered) is kept as a single row
    with a note explaining the gap.
    """
    found = registry.lookup(record.references())
    expanded: list[FieldRecord] = []

    for field in record.fields:
        if not field.attrs.flatten:
            expanded.append(field)
            continue

        nested = found.get(field.reference)
        if nested is None:
            note = f"Note: This field is flattened from {field.reference} (not registered)"
            expanded.append(field.model_copy(update={"doc": note}))
            continue

        for nested_field in nested.fields:
            expanded.append(
                nested_field.model_copy(
                    update={
                        "group": field.reference,
                        "name": apply_case(nested_field.name, record.case_style),
                        "cased": True,
                    }
                )
            )

    return record.model_copy(update={"fields": expanded})
