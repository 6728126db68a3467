"""
Shared test fixtures and configuration.
"""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from confdoc.core.models import CaseStyle, FieldAttributes, FieldRecord, RecordDefinition


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented Python source file under tmp_path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def table_rows() -> Callable[[str], list[list[str]]]:
    """Parse the data rows of every markdown table in a text.

    Header and separator lines are skipped; cells are stripped.
    """

    def _parse(text: str) -> list[list[str]]:
        rows = []
        for line in text.splitlines():
            if not line.startswith("|") or line.startswith("|-"):
                continue
            cells = [c.strip() for c in line.strip("|").split("|")]
            if cells[0] == "Field Name":
                continue
            rows.append(cells)
        return rows

    return _parse


def _make_field(
    name: str,
    type_name: str = "str",
    group: str = "Config",
    doc: str | None = None,
    **attrs,
) -> FieldRecord:
    return FieldRecord(
        name=name,
        type_name=type_name,
        doc=doc,
        attrs=FieldAttributes(**attrs),
        group=group,
    )


def _make_record(
    name: str,
    fields: list[tuple],
    case_style: CaseStyle | None = CaseStyle.KEBAB,
) -> RecordDefinition:
    """Build a record from ``(field_name, type_name, attrs_dict[, doc])`` tuples."""
    built = []
    for spec in fields:
        field_name, type_name, attrs = spec[0], spec[1], spec[2]
        doc = spec[3] if len(spec) > 3 else None
        group = type_name if attrs.get("flatten") else name
        built.append(_make_field(field_name, type_name, group=group, doc=doc, **attrs))
    return RecordDefinition(name=name, fields=built, case_style=case_style)


@pytest.fixture
def make_record() -> Callable[..., RecordDefinition]:
    return _make_record


@pytest.fixture
def database_config() -> RecordDefinition:
    return _make_record(
        "DatabaseConfig",
        [
            ("postgres_host", "str", {}, "Database host"),
            ("postgres_port", "int", {"default_expr": "5432"}, "Database port"),
        ],
    )


@pytest.fixture
def cache_config() -> RecordDefinition:
    return _make_record(
        "CacheConfig",
        [
            ("cache_host", "str", {}, "Cache host"),
            ("cache_ttl", "int", {"default_expr": "3600"}, "Cache TTL in seconds"),
        ],
    )


@pytest.fixture
def main_config() -> RecordDefinition:
    return _make_record(
        "MainConfig",
        [
            ("port", "int", {"default_expr": "8080"}, "Server port"),
            ("database", "DatabaseConfig", {"flatten": True}, "Database configuration"),
            ("cache", "CacheConfig", {"flatten": True}, "Cache configuration"),
        ],
    )
