from __future__ import annotations

from typing import Any, Optional


class ManifestError(Exception):
    """
    Base class for all manifest errors.

    Carries optional context so an operator can fix the offending manifest or
    file table without reading the code:

        field: Name of the wire/model field involved (e.g. "requestedPerformer").
        expected: What was expected there.
        found: What was actually found.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        expected: Any = None,
        found: Any = None,
    ):
        self.field = field
        self.expected = expected
        self.found = found
        super().__init__(self._render(message))

    def _render(self, message: str) -> str:
        parts = [message]
        if self.field is not None:
            parts.append(f"field={self.field!r}")
        if self.expected is not None:
            parts.append(f"expected={self.expected!r}")
        if self.found is not None:
            parts.append(f"found={self.found!r}")
        return " | ".join(parts)


class InvalidInputError(ManifestError, ValueError):
    """Raised when construction input (e.g. a file table) is malformed."""


class ParseError(ManifestError, ValueError):
    """Raised when wire JSON is invalid or misses required fields."""


class DecodeError(ParseError):
    """Raised when an Attachment element cannot be decoded."""


class InvalidStateError(ManifestError):
    """Raised when a lifecycle operation is invoked on a manifest in the wrong state."""


class UnsupportedFormatError(ManifestError, ValueError):
    """Raised for an unrecognized archive kind."""
