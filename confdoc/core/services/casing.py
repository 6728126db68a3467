"""
Case-style transformation for displayed field names.

Words are split on separators (``_``, ``-``, spaces, dots) and on case
boundaries, so ``postgresHost``, ``postgres_host`` and ``postgres-host``
all split into ``["postgres", "host"]``.  Styles are not idempotent for
single-letter words (camelCase ``x_y_z`` gives ``xYZ``, which re-splits as
``x`` + ``YZ``), so a name is transformed at most once: expansion marks
the fields it renames and rendering leaves those alone.
"""

from __future__ import annotations

import re

from confdoc.core.models.record import CaseStyle

# An acronym followed by a capitalised word, a capitalised or lowercase
# word, or a run of capitals / digits.
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z0-9]+")
_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")


def split_words(name: str) -> list[str]:
    """Split an identifier into its words."""
    words: list[str] = []
    for chunk in _SEPARATOR_RE.split(name):
        if chunk:
            words.extend(_WORD_RE.findall(chunk))
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def apply_case(name: str, style: CaseStyle | None) -> str:
    """Render ``name`` in ``style``; None leaves the name untouched."""
    if style is None:
        return name

    words = split_words(name)
    if not words:
        return name

    if style == CaseStyle.SNAKE:
        return "_".join(w.lower() for w in words)
    if style == CaseStyle.KEBAB:
        return "-".join(w.lower() for w in words)
    if style == CaseStyle.SCREAMING_SNAKE:
        return "_".join(w.upper() for w in words)
    if style == CaseStyle.SCREAMING_KEBAB:
        return "-".join(w.upper() for w in words)
    if style == CaseStyle.PASCAL:
        return "".join(_capitalize(w) for w in words)
    if style == CaseStyle.CAMEL:
        return words[0].lower() + "".join(_capitalize(w) for w in words[1:])

    raise ValueError(f"Unsupported case style: {style}")
