"""Header masking for debug logs.

Requests forwarded to the origin may carry the browsing session's cookies
or credentials; those values never reach the log.
"""

from __future__ import annotations

from collections.abc import Mapping

_SENSITIVE_HEADERS: frozenset[str] = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "x-csrf-token",
    }
)

_MAX_VALUE = 256


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of *headers* with credentials masked and long values cut."""
    masked: dict[str, str] = {}
    for name, value in headers.items():
        if name.lower() in _SENSITIVE_HEADERS:
            masked[name] = "<redacted>"
        elif len(value) > _MAX_VALUE:
            masked[name] = f"{value[:_MAX_VALUE]}...<{len(value)} chars>"
        else:
            masked[name] = value
    return masked
