"""
Logging configuration for the confdoc CLI.

``setup_logging`` runs once at startup; module loggers created with
``logging.getLogger(__name__)`` inherit it.  Build output is short, so
the console shows bare messages unless -v or --debug ask for more.
"""

from __future__ import annotations

import logging
import sys

_CONSOLE_FORMATS = {
    logging.DEBUG: "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s",
    logging.INFO: "%(asctime)s [%(name)s] %(message)s",
}
_CONSOLE_DEFAULT = "%(levelname)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"


def _level(name: str | None, fallback: int = logging.WARNING) -> int:
    numeric = logging.getLevelName(name.upper()) if name else None
    return numeric if isinstance(numeric, int) else fallback


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Point the root logger at stderr, and optionally at ``log_file``.

    Unknown level names fall back to WARNING; the file level defaults
    to the console level.
    """
    console_level = _level(level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(_CONSOLE_FORMATS.get(console_level, _CONSOLE_DEFAULT), datefmt="%H:%M:%S")
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(console_level)

    if log_file:
        file_level = _level(log_file_level, fallback=console_level)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(handler)
        root.setLevel(min(console_level, file_level))
