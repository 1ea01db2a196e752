from __future__ import annotations

from collections.abc import Iterable, Mapping

PartHeaders = Mapping[str, "str | Iterable[str]"]


def _header_values(value: str | Iterable[str]) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def serialize_part_headers(headers: PartHeaders) -> bytes:
    """
    Serialize a part header block, terminating blank line included.

    Names are emitted in ascending lexicographic order so the same logical
    headers always produce the same bytes, whatever order they were added in.
    A name mapped to several values yields one line per value. Names and
    values are written verbatim.
    """
    lines: list[str] = []
    for name in sorted(headers):
        for value in _header_values(headers[name]):
            lines.append(f"{name}: {value}\r\n")
    lines.append("\r\n")
    return "".join(lines).encode("utf-8")
