"""
Conversion of the different header containers into canonical headers,
an ordered `dict[str, str]` with one (folded) value per header name.
"""

from collections.abc import Mapping
from collections.abc import Sequence

RawHeaders = dict[str, str]

HeaderValue = str | int | Sequence[str | int] | None
"""A value as found in a plain header mapping of a streaming message."""


def headers_from_multidict(headers: Mapping[str, str]) -> RawHeaders:
    """
    Convert a case-insensitive multi-map (`httpsnap.http.Headers`) into canonical headers.

    Repeated headers have already been folded by the container itself,
    so this takes one entry per distinct name, in the container's order.
    """
    return {name: value for name, value in headers.items()}


def headers_from_mapping(headers: Mapping[str, HeaderValue]) -> RawHeaders:
    """
    Convert a plain header mapping into canonical headers.

    List values are joined with ", ", and entries without a value are skipped.
    Key casing is kept as-is.
    """
    result: RawHeaders = {}
    for name, value in headers.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            result[name] = ", ".join(str(v) for v in value)
        else:
            result[name] = str(value)
    return result


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """
    Case-insensitive lookup in canonical headers, returning the first match.
    """
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def assemble_header_lines(headers: Mapping[str, str]) -> list[str]:
    return [f"{name}: {value}" for name, value in headers.items()]
