"""
Document updater — splice rendered tables into a marker region.

The region between the start and end markers belongs to confdoc and is
replaced wholesale on every update; everything outside it is kept
byte-for-byte.  A missing file is created holding only the markers; a
file without markers gets them appended.

Writes are atomic (write to temp file, then rename) so an interrupted
build never leaves a half-written document behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from confdoc.core.errors import ConfdocError

logger = logging.getLogger(__name__)

START_MARKER = "[//]: # (CONFIG_DOCS_START)"
END_MARKER = "[//]: # (CONFIG_DOCS_END)"


class DocumentError(ConfdocError):
    """Raised when a target document cannot be read or written."""

    def __init__(self, path: Path, action: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to {action} file {path}: {cause}")


def splice(content: str, rendered: str) -> str:
    """Return ``content`` with the marker region replaced by ``rendered``."""
    start = content.find(START_MARKER)
    end = content.find(END_MARKER, start + len(START_MARKER)) if start != -1 else -1

    if start == -1 or end == -1:
        return f"{content}\n{START_MARKER}\n\n{rendered}\n\n{END_MARKER}"

    before = content[: start + len(START_MARKER)]
    after = content[end:]
    return f"{before}\n\n{rendered}\n\n{after}"


def update_document(path: Path, rendered: str) -> None:
    """Rewrite the marker region of ``path`` with ``rendered``.

    Raises:
        DocumentError: If the file cannot be read or written.
    """
    if path.is_file():
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentError(path, "read", e) from e
    else:
        content = f"{START_MARKER}\n\n{END_MARKER}"

    updated = splice(content, rendered)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".confdoc_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(updated)
            os.chmod(tmp, path.stat().st_mode & 0o777 if path.exists() else 0o644)
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        raise DocumentError(path, "write", e) from e

    logger.debug("Updated %s (%d bytes)", path, len(updated))
