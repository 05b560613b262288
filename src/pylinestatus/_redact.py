"""Helpers for safe debug logging.

Feed requests carry the API key in a header and feed bodies are opaque
binary blobs.  Neither should reach DEBUG logs verbatim.
"""

from __future__ import annotations

from collections.abc import Mapping

_SENSITIVE_HEADERS: frozenset[str] = frozenset(
    {
        "x-api-key",
        "apikey",
        "api_key",
        "authorization",
        "cookie",
    }
)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with credentials masked."""
    return {name: "<redacted>" if name.lower() in _SENSITIVE_HEADERS else value for name, value in headers.items()}


def preview_payload(payload: bytes, *, limit: int = 48) -> str:
    """Short printable preview of a response body."""
    if len(payload) <= limit:
        return repr(payload)
    return f"{payload[:limit]!r}…<{len(payload)}b>"
