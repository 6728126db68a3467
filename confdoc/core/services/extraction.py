"""
Declaration extraction — read confdoc markers from Python source.

Uses stdlib ``ast``; never imports or executes the scanned code.

A declaration is a top-level class decorated with ``@register`` and/or
``@generate(...)``.  Its annotated class attributes become fields:

    @generate(target="README.md", format="grouped")
    @rename_all("kebab-case")
    class Config:
        database: DatabaseConfig = option(flatten=True)
        port: int = 8080
        \"\"\"Server port\"\"\"

Markers are matched by their final name, so ``confdoc.register`` and
a bare ``register`` import are equivalent.

Public API:
    parse_source(text, source)  → ScanResult for a source string
    parse_file(path)            → ScanResult for one .py file
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from confdoc.core.errors import ConfdocError
from confdoc.core.models.record import CaseStyle, FieldAttributes, FieldRecord, RecordDefinition
from confdoc.core.models.request import Declaration, OutputConfig, OutputFormat

logger = logging.getLogger(__name__)

REGISTER_MARKER = "register"
GENERATE_MARKER = "generate"
RENAME_ALL_MARKER = "rename_all"
OPTION_MARKER = "option"

_MARKERS = (REGISTER_MARKER, GENERATE_MARKER)

_FLAG_KEYS = ("flatten", "required", "skip")
_STRING_KEYS = ("env", "rename", "help", "about")
_CONTAINER_NODES = (ast.List, ast.Tuple, ast.Set, ast.Dict)


class StructuralError(ConfdocError):
    """A declaration that cannot be turned into a record definition."""

    def __init__(self, message: str, source: str = "", lineno: int = 0):
        self.message = message
        self.source = source
        self.lineno = lineno
        location = f"{source}:{lineno}: " if source else ""
        super().__init__(f"{location}{message}")


@dataclass
class ScanResult:
    """Declarations and structural errors found in one source."""
    source: str
    declarations: list[Declaration] = field(default_factory=list)
    errors: list[StructuralError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "declarations": [
                {
                    "record": d.record.model_dump(mode="json"),
                    "registered": d.registered,
                    "output": d.output.model_dump(mode="json") if d.output else None,
                    "lineno": d.lineno,
                }
                for d in self.declarations
            ],
            "errors": [str(e) for e in self.errors],
        }


# ═══════════════════════════════════════════════════════════════════
#  AST helpers
# ═══════════════════════════════════════════════════════════════════


def _marker_name(node: ast.expr) -> str | None:
    """Final name of a decorator: ``register``, ``confdoc.generate(...)`` → generate."""
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _option_call(node: ast.expr | None) -> ast.Call | None:
    """The ``option(...)`` call assigned to a field, if that is what it is."""
    if isinstance(node, ast.Call) and _marker_name(node.func) == OPTION_MARKER:
        return node
    return None


def _first_line(text: str) -> str | None:
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line
    return None


class _Parser:
    """Turns decorated ClassDef nodes into Declarations."""

    def __init__(self, source: str):
        self.source = source

    def error(self, message: str, node: ast.AST) -> StructuralError:
        return StructuralError(message, self.source, getattr(node, "lineno", 0))

    # ── Literal values ───────────────────────────────────────────

    def string(self, node: ast.expr, key: str) -> str:
        if isinstance(node, _CONTAINER_NODES):
            raise self.error(f"nested lists are not supported for '{key}'", node)
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            return node.value
        raise self.error(f"expected string literal for '{key}'", node)

    def flag(self, node: ast.expr, key: str) -> bool:
        if isinstance(node, _CONTAINER_NODES):
            raise self.error(f"nested lists are not supported for '{key}'", node)
        if isinstance(node, ast.Constant) and isinstance(node.value, bool):
            return node.value
        raise self.error(f"expected True or False for '{key}'", node)

    def char(self, node: ast.expr, key: str) -> str:
        value = self.string(node, key)
        if len(value) != 1:
            raise self.error(f"expected single character for '{key}'", node)
        return value

    # ── Class-level markers ──────────────────────────────────────

    def generate_args(self, node: ast.expr) -> OutputConfig:
        if not isinstance(node, ast.Call):
            raise self.error("@generate requires a target, e.g. @generate(target=\"README.md\")", node)
        if len(node.args) > 1:
            raise self.error("@generate takes at most one positional argument (target)", node)

        options: dict[str, Any] = {}
        if node.args:
            options["target"] = self.string(node.args[0], "target")
        for kw in node.keywords:
            if kw.arg == "target":
                options["target"] = self.string(kw.value, "target")
            elif kw.arg == "format":
                value = self.string(kw.value, "format")
                try:
                    options["format"] = OutputFormat(value)
                except ValueError:
                    choices = ", ".join(f.value for f in OutputFormat)
                    raise self.error(
                        f"unknown format '{value}' (expected one of: {choices})", kw.value
                    ) from None
            else:
                raise self.error(f"unknown @generate option '{kw.arg}'", kw.value)

        if "target" not in options:
            raise self.error("@generate requires a 'target' option", node)
        try:
            return OutputConfig(**options)
        except ValidationError as e:
            raise self.error(f"invalid @generate options: {e}", node) from e

    def rename_all(self, node: ast.expr) -> CaseStyle | None:
        if not isinstance(node, ast.Call) or len(node.args) != 1 or node.keywords:
            raise self.error("@rename_all takes exactly one case style string", node)
        value = self.string(node.args[0], "rename_all")
        style = CaseStyle.parse(value)
        if style is None:
            logger.warning(
                "%s:%d: unknown rename_all style '%s', field names left as declared",
                self.source,
                node.lineno,
                value,
            )
        return style

    # ── Fields ───────────────────────────────────────────────────

    def option_attrs(self, call: ast.Call, attrs: dict[str, Any]) -> None:
        if call.args:
            raise self.error("option() accepts keyword arguments only", call.args[0])
        for kw in call.keywords:
            key, value = kw.arg, kw.value
            if key is None:
                raise self.error("option() does not accept **kwargs", value)
            if key in _FLAG_KEYS:
                attrs[key] = self.flag(value, key)
            elif key in _STRING_KEYS:
                attrs[key] = self.string(value, key)
            elif key in ("short", "long"):
                # bare flag form: option(short=True, long=True)
                if isinstance(value, ast.Constant) and isinstance(value.value, bool):
                    attrs[key] = value.value
                elif key == "short":
                    attrs[key] = self.char(value, key)
                else:
                    attrs[key] = self.string(value, key)
            elif key == "default":
                self.default(value, attrs)
            else:
                logger.debug("%s:%d: ignoring option '%s'", self.source, value.lineno, key)

    @staticmethod
    def default(value: ast.expr, attrs: dict[str, Any]) -> None:
        if isinstance(value, ast.Constant) and isinstance(value.value, str):
            attrs["default_value"] = value.value
        else:
            attrs["default_expr"] = ast.unparse(value)

    def field_record(
        self, name: str, stmt: ast.AnnAssign, next_stmt: ast.stmt | None, owner: str
    ) -> FieldRecord:
        attrs: dict[str, Any] = {}
        call = _option_call(stmt.value)
        if call is not None:
            self.option_attrs(call, attrs)
        elif stmt.value is not None:
            self.default(stmt.value, attrs)

        doc = None
        if (
            isinstance(next_stmt, ast.Expr)
            and isinstance(next_stmt.value, ast.Constant)
            and isinstance(next_stmt.value.value, str)
        ):
            doc = _first_line(next_stmt.value.value)
        if doc is None and attrs.get("help"):
            doc = _first_line(attrs["help"])

        record = FieldRecord(
            name=name,
            type_name=ast.unparse(stmt.annotation),
            doc=doc,
            attrs=FieldAttributes(**attrs),
            group=owner,
        )
        if record.attrs.flatten and record.reference:
            record = record.model_copy(update={"group": record.reference})
        return record

    def fields(self, node: ast.ClassDef) -> list[FieldRecord]:
        records: list[FieldRecord] = []
        body = node.body
        for i, stmt in enumerate(body):
            if not isinstance(stmt, ast.AnnAssign):
                continue
            if not isinstance(stmt.target, ast.Name):
                raise self.error("only named class attributes are supported", stmt)
            annotation = stmt.annotation
            if isinstance(annotation, ast.Subscript):
                annotation = annotation.value
            if _marker_name(annotation) == "ClassVar":
                continue
            next_stmt = body[i + 1] if i + 1 < len(body) else None
            records.append(self.field_record(stmt.target.id, stmt, next_stmt, node.name))
        return records

    # ── Declarations ─────────────────────────────────────────────

    def declaration(self, node: ast.ClassDef) -> Declaration:
        registered = False
        output: OutputConfig | None = None
        case_style: CaseStyle | None = None

        for deco in node.decorator_list:
            name = _marker_name(deco)
            if name == REGISTER_MARKER:
                registered = True
            elif name == GENERATE_MARKER:
                output = self.generate_args(deco)
            elif name == RENAME_ALL_MARKER:
                case_style = self.rename_all(deco)

        record = RecordDefinition(
            name=node.name,
            fields=self.fields(node),
            case_style=case_style,
        )
        return Declaration(
            record=record,
            registered=registered,
            output=output,
            source=self.source,
            lineno=node.lineno,
        )


def _is_declaration(node: ast.stmt) -> bool:
    decorators = getattr(node, "decorator_list", [])
    return any(_marker_name(d) in _MARKERS for d in decorators)


# ═══════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════


def parse_source(text: str, source: str = "<string>") -> ScanResult:
    """Extract declarations from Python source text.

    A structural problem in one declaration is recorded and the scan
    moves on to the next one.
    """
    result = ScanResult(source=source)
    try:
        tree = ast.parse(text, filename=source)
    except SyntaxError as e:
        result.errors.append(StructuralError(f"syntax error: {e.msg}", source, e.lineno or 0))
        return result

    parser = _Parser(source)
    for node in tree.body:
        if not _is_declaration(node):
            continue
        if not isinstance(node, ast.ClassDef):
            result.errors.append(
                parser.error("confdoc markers can only decorate classes with annotated fields", node)
            )
            continue
        try:
            result.declarations.append(parser.declaration(node))
        except StructuralError as e:
            logger.debug("Skipping %s: %s", node.name, e)
            result.errors.append(e)

    return result


def parse_file(path: Path, display: str | None = None) -> ScanResult:
    """Extract declarations from one Python file."""
    source = display or str(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        result = ScanResult(source=source)
        result.errors.append(StructuralError(f"cannot read file: {e}", source))
        return result
    return parse_source(text, source)
