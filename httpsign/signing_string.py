"""
Canonical signing string.

Both sides hash the same string, so it is derived deterministically from
the request method, the path and the values of the signed headers, in the
order the signature declares them.
"""

from typing import Mapping, Sequence, Union

from .constants import REQUEST_TARGET
from .exceptions import MissingHeader

HeaderValue = Union[str, Sequence[str]]


def normalize_headers(headers: Mapping[str, HeaderValue]) -> dict:
    """Lowercase header names and fold repeated values into one string."""
    normalized = {}
    for name, value in headers.items():
        if not isinstance(value, str):
            value = ", ".join(value)
        name = name.lower()
        # Repeated header names in a flat mapping are folded together
        if name in normalized:
            normalized[name] = f"{normalized[name]}, {value}"
        else:
            normalized[name] = value
    return normalized


def build_signing_string(
    method: str,
    path: str,
    headers: Mapping[str, HeaderValue],
    signed_headers: Sequence[str],
) -> str:
    """
    Build the string to be signed.

    The ``(request-target)`` pseudo-header expands to the lowercased method
    and the path. Every other name expands to ``name: value`` using the raw
    header value; a list of values is comma-joined.

    Args:
        method: HTTP method
        path: Request path, including the query string if any
        headers: Request headers (looked up case-insensitively)
        signed_headers: Ordered names of the headers to cover

    Returns:
        The lines joined with ``\\n``

    Raises:
        MissingHeader: If a declared header is absent, or none are declared
    """
    if not signed_headers:
        raise MissingHeader("no headers to sign")

    values = normalize_headers(headers)
    lines = []
    for name in signed_headers:
        name = name.lower()
        if name == REQUEST_TARGET:
            lines.append(f"{REQUEST_TARGET}: {method.lower()} {path}")
            continue
        if name not in values:
            raise MissingHeader(f"missing signed header: {name}")
        lines.append(f"{name}: {values[name]}")
    return "\n".join(lines)
