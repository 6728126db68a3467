"""
Build use case — scan sources and generate every requested table.

This is the host pipeline around the ResolutionDriver: it walks the
configured sources in a stable order (sorted paths, then declaration
order within each file) and hands each declaration to the driver.
Structural errors abort only the declaration they occur in; document
I/O errors fail only the affected request.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path

from confdoc.core.config.loader import DEFAULT_EXCLUDES, BuildConfig, ConfigError, load_config
from confdoc.core.engine.driver import ResolutionDriver
from confdoc.core.models.request import GenerationOutcome, OutcomeStatus
from confdoc.core.services.extraction import parse_file

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of one build."""

    root: Path | None = None
    files_scanned: int = 0
    declarations: int = 0
    outcomes: list[GenerationOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    pending: dict[str, list[str]] = field(default_factory=dict)
    pending_requests: dict[str, list[dict]] = field(default_factory=dict)
    registered: list[str] = field(default_factory=list)

    @property
    def failed(self) -> list[GenerationOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def written(self) -> list[GenerationOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.WRITTEN]

    @property
    def ok(self) -> bool:
        """No structural errors and no failed writes. Pending is not a failure."""
        return not self.errors and not self.failed

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "root": str(self.root) if self.root else None,
            "files_scanned": self.files_scanned,
            "declarations": self.declarations,
            "written": [o.model_dump(mode="json") for o in self.written],
            "failed": [o.model_dump(mode="json") for o in self.failed],
            "errors": self.errors,
            "pending": self.pending,
            "pending_requests": self.pending_requests,
            "registered": self.registered,
        }


def _excluded(rel: Path, patterns: list[str]) -> bool:
    if any(part in DEFAULT_EXCLUDES for part in rel.parts):
        return True
    posix = rel.as_posix()
    return any(fnmatch.fnmatch(posix, pattern) for pattern in patterns)


def collect_sources(config: BuildConfig, paths: list[Path] | None = None) -> list[Path]:
    """Python files to scan, de-duplicated, in a stable order."""
    roots = [p.resolve() for p in paths] if paths else config.source_paths()
    files: list[Path] = []
    seen: set[Path] = set()

    for src in roots:
        if src.is_file():
            candidates = [src]
        elif src.is_dir():
            candidates = sorted(
                p for p in src.rglob("*.py")
                if not _excluded(p.relative_to(src), config.exclude)
            )
        else:
            logger.warning("Source path does not exist: %s", src)
            continue

        for path in candidates:
            if path not in seen:
                seen.add(path)
                files.append(path)

    return files


def _display(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def run_build(
    config_path: Path | None = None,
    paths: list[Path] | None = None,
    force: bool = False,
    driver: ResolutionDriver | None = None,
) -> BuildResult:
    """Scan sources and generate documentation.

    Args:
        config_path: Optional explicit path to confdoc.yml.
        paths: Files or directories to scan instead of the configured sources.
        force: Render requests still pending at the end, with placeholder
            rows for unregistered references.
        driver: Driver to use (default: a fresh one rooted at the config root).

    Returns:
        BuildResult; configuration problems are reported in ``errors``.
    """
    result = BuildResult()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.root = config.root
    if driver is None:
        driver = ResolutionDriver(root=config.root)

    for path in collect_sources(config, paths):
        result.files_scanned += 1
        scan = parse_file(path, display=_display(path, config.root))

        for error in scan.errors:
            logger.error("%s", error)
            result.errors.append(str(error))

        for declaration in scan.declarations:
            result.declarations += 1
            logger.debug("Processing %s at %s", declaration.record.name, declaration.location)
            result.outcomes.extend(driver.process(declaration))

    if force:
        result.outcomes.extend(driver.force_pending())

    result.registered = driver.registry.names()
    result.pending = driver.pending_report()
    result.pending_requests = driver.pending.to_dict()
    for target, records in result.pending.items():
        logger.info("Still pending for %s: %s", target, ", ".join(records))

    return result
