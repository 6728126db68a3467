"""
Table rendering — expanded records to GitHub-flavoured markdown.

Two layouts:
    flat     one table with a Group column
    grouped  one ``## <group> Configuration`` section per group, in
             first-seen order, each with its own table (no Group column)
"""

from __future__ import annotations

from dataclasses import dataclass

from tabulate import tabulate

from confdoc.core.models.record import FieldRecord, RecordDefinition
from confdoc.core.models.request import OutputFormat
from confdoc.core.services.casing import apply_case

FLAT_HEADERS = ["Field Name", "Type", "Required", "Default", "Details", "Group"]
GROUPED_HEADERS = ["Field Name", "Type", "Required", "Default", "Details"]

NO_DEFAULT = "-"


@dataclass
class TableRow:
    """Display values for one field."""
    field_name: str
    field_type: str
    required: str
    default: str
    details: str
    group: str

    def cells(self, with_group: bool = True) -> list[str]:
        cells = [self.field_name, self.field_type, self.required, self.default, self.details]
        if with_group:
            cells.append(self.group)
        return [_cell(c) for c in cells]


def _cell(text: str) -> str:
    """Keep a value on one markdown row."""
    return " ".join(text.split()).replace("|", "\\|")


def build_row(field: FieldRecord, record: RecordDefinition) -> TableRow:
    """Derive the displayed values of ``field`` inside ``record``."""
    attrs = field.attrs
    if attrs.default_value is not None:
        default = attrs.default_value
    elif attrs.default_expr is not None:
        default = attrs.default_expr
    else:
        default = NO_DEFAULT

    return TableRow(
        field_name=field.name if field.cased else apply_case(field.name, record.case_style),
        field_type=field.type_name,
        required="No" if attrs.has_default else "Yes",
        default=default,
        details=field.doc or "",
        group=field.group,
    )


def _table(rows: list[list[str]], headers: list[str]) -> str:
    return tabulate(
        rows,
        headers=headers,
        tablefmt="github",
        disable_numparse=True,
        stralign="left",
    )


def render_flat(record: RecordDefinition) -> str:
    """One table covering every field, in field order."""
    rows = [build_row(f, record).cells() for f in record.fields]
    return _table(rows, FLAT_HEADERS)


def render_grouped(record: RecordDefinition) -> str:
    """One headed table per group, groups in first-seen order."""
    groups: dict[str, list[FieldRecord]] = {}
    for field in record.fields:
        groups.setdefault(field.group, []).append(field)

    sections = []
    for group, fields in groups.items():
        rows = [build_row(f, record).cells(with_group=False) for f in fields]
        sections.append(f"## {group} Configuration\n\n{_table(rows, GROUPED_HEADERS)}")
    return "\n\n".join(sections)


def render(record: RecordDefinition, fmt: OutputFormat) -> str:
    """Render an expanded record in the requested layout."""
    if fmt == OutputFormat.FLAT:
        return render_flat(record)
    if fmt == OutputFormat.GROUPED:
        return render_grouped(record)
    raise ValueError(f"Unsupported output format: {fmt}")
