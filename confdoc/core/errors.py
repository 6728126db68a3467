"""
Base exception for confdoc.

Each layer raises its own subclass (ConfigError, StructuralError,
DocumentError) so callers can catch the whole family at the build
boundary.
"""

from __future__ import annotations


class ConfdocError(Exception):
    """Root of all errors raised by confdoc."""
