"""
Declaration markers — used in configuration modules.

The build reads these markers from source without importing it, so at
runtime they only have to stay out of the way: class decorators return
the class unchanged and ``option()`` returns a ``dataclasses.field`` so
marked classes also work as dataclasses.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, TypeVar

from confdoc.core.models.record import CaseStyle
from confdoc.core.models.request import OutputFormat

T = TypeVar("T", bound=type)

METADATA_KEY = "confdoc"


def register(cls: T) -> T:
    """Make a record available for flattening into other records."""
    return cls


def generate(target: str, format: str = OutputFormat.FLAT.value) -> Callable[[T], T]:
    """Request a reference table for the decorated record in ``target``."""
    OutputFormat(format)  # unknown formats fail at import time too

    def decorator(cls: T) -> T:
        return cls

    return decorator


def rename_all(style: str) -> Callable[[T], T]:
    """Declare the case style used to display the record's field names."""
    if CaseStyle.parse(style) is None:
        raise ValueError(f"Unknown case style: {style!r}")

    def decorator(cls: T) -> T:
        return cls

    return decorator


def option(*, default: Any = dataclasses.MISSING, **attrs: Any) -> Any:
    """Attach documentation attributes to a field.

    Recognised attributes: ``flatten``, ``required``, ``skip``, ``long``,
    ``short``, ``env``, ``rename``, ``help``, ``about`` and ``default``.
    """
    return dataclasses.field(default=default, metadata={METADATA_KEY: attrs})
