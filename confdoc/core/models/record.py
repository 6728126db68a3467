"""
Record model — the documented shape of one configuration type.

A RecordDefinition is what the extraction layer produces for each
declared class: its name, its fields in declaration order, and the
case style used to display field names.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class CaseStyle(StrEnum):
    """Field-name case conventions (the ``rename_all`` spellings)."""

    SNAKE = "snake_case"
    CAMEL = "camelCase"
    PASCAL = "PascalCase"
    KEBAB = "kebab-case"
    SCREAMING_SNAKE = "SCREAMING_SNAKE_CASE"
    SCREAMING_KEBAB = "SCREAMING-KEBAB-CASE"

    @classmethod
    def parse(cls, text: str) -> CaseStyle | None:
        """Map a ``rename_all`` spelling to a style, or None if unknown."""
        try:
            return cls(text)
        except ValueError:
            return None


class FieldAttributes(BaseModel):
    """Behavioural attributes declared on a field via ``option(...)``."""

    # ── Behavioural flags ────────────────────────────────────────
    flatten: bool = False
    required: bool = False
    skip: bool = False

    # ── Defaults ─────────────────────────────────────────────────
    default_value: str | None = None    # literal text, shown as-is
    default_expr: str | None = None     # source text of a default expression

    # ── Naming / binding overrides ───────────────────────────────
    long: str | bool | None = None
    short: str | bool | None = None
    env: str | None = None
    rename: str | None = None

    # ── Documentation ────────────────────────────────────────────
    help: str | None = None
    about: str | None = None

    @property
    def has_default(self) -> bool:
        """Whether a literal default or a default expression is present."""
        return self.default_value is not None or self.default_expr is not None


class FieldRecord(BaseModel):
    """One documented field of a record.

    ``group`` is the record the row belongs to: the declaring record,
    or the record a flattened field was pulled in from.  Fields copied in
    by expansion are renamed on the way and marked ``cased``.
    """

    name: str
    type_name: str
    doc: str | None = None
    attrs: FieldAttributes = Field(default_factory=FieldAttributes)
    group: str = Field(min_length=1)
    cased: bool = False     # name already carries the display case style

    @property
    def reference(self) -> str:
        """The annotation collapsed to its last significant segment.

        ``settings.DatabaseConfig`` and ``"DatabaseConfig"`` both
        collapse to ``DatabaseConfig``.
        """
        text = self.type_name.strip().strip("\"'")
        return text.rsplit(".", 1)[-1].strip()


class RecordDefinition(BaseModel):
    """A named, ordered collection of fields for one configuration type."""

    name: str
    fields: list[FieldRecord] = Field(default_factory=list)
    case_style: CaseStyle | None = None

    def flattened_fields(self) -> list[FieldRecord]:
        """Fields whose documentation is inlined from another record."""
        return [f for f in self.fields if f.attrs.flatten]

    def references(self) -> list[str]:
        """Names of the records this definition flattens, in field order."""
        return [f.reference for f in self.flattened_fields()]
