from __future__ import annotations

import re
from typing import Any

MISSING = "--MISSING--"

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9\-_()]")


def sanitize(text: Any, fallback: str = MISSING) -> str:
    """
    Turn arbitrary text into one safe dot-separated component of a filename.

    Non-ASCII characters become "_" (no accent folding is attempted, so
    "café" turns into "caf_"). Anything else outside [A-Za-z0-9-_()] also
    becomes "_".

    Args:
        text: Value to clean. Anything that is not a string counts as missing.
        fallback: Returned for missing values and for results that are empty
                  or consist only of underscores.

    Returns:
        The cleaned fragment, or ``fallback``.
    """
    if not isinstance(text, str):
        return fallback

    ascii_only = "".join(c if ord(c) < 128 else "_" for c in text)
    cleaned = _UNSAFE_RE.sub("_", ascii_only)

    if not cleaned.strip("_"):
        return fallback
    return cleaned
