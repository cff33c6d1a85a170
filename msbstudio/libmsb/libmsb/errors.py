"""libmsb.errors

Every failure raised by libmsb derives from MsbError. A failed load returns
nothing. A failed save leaves the graph linked, with its tables possibly
already regrouped by type.
"""

from __future__ import annotations

from typing import Optional


class MsbError(RuntimeError):
    pass


class MalformedStructureError(MsbError):
    """The bytes do not match the layout we expect (bad magic, failed
    constant check, index out of range, broken table chain)."""

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at 0x{offset:X})"
        super().__init__(message)
        self.offset = offset


class UnsupportedVariantError(MsbError):
    """A tag outside the closed set this library models."""


class AuthoringError(MsbError):
    """The in-memory graph or the writer was used incorrectly by the caller."""
