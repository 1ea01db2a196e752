from __future__ import annotations

import string
import uuid

# RFC 2046 bchars, minus the space which is only legal in the middle.
_BCHARS = frozenset(string.ascii_letters + string.digits + "'()+_,-./:=? ")


def random_boundary() -> str:
    return uuid.uuid4().hex


def validate_boundary(boundary: str) -> str:
    """
    Check a caller-supplied boundary against RFC 2046.
    Returns the boundary unchanged, raises ValueError otherwise.
    """
    if not 1 <= len(boundary) <= 70:
        raise ValueError("Boundary must be between 1 and 70 characters")
    if boundary.endswith(" "):
        raise ValueError("Boundary must not end with a space")
    bad = set(boundary) - _BCHARS
    if bad:
        raise ValueError(f"Invalid boundary characters: {''.join(sorted(bad))!r}")
    return boundary


def escape_quotes(value: str) -> str:
    # Backslashes first so the escapes added for quotes are not doubled.
    return value.replace("\\", "\\\\").replace('"', '\\"')
