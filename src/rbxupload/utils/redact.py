"""Credential / payload redaction for safe logging and error messages.

Before any request or response is written to logs or debug artifacts the
:func:`redact` function must be applied.  It enforces the following rules:

* **Sensitive headers and keys** (``Cookie``, ``x-api-key``,
  ``X-CSRF-Token`` and friends) are replaced with a masked placeholder.
* **Binary values** (raw image bytes, multipart bodies) are replaced with
  ``<binary:N_bytes>``.
* The full **secret is never present** in the output.

:func:`scrub` applies the same secret masking to a single free-text
string, for response bodies that end up inside error messages.
"""

from __future__ import annotations

import copy
import re
from typing import Any

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "token",
    "secret",
    "password",
    "credential",
    "authorization",
    "cookie",
    "api_key",
    "api-key",
    "x-api-key",
    "x-csrf-token",
})

# Session cookies are long opaque strings behind this marker.
_ROBLOSECURITY_RE = re.compile(r"(\.ROBLOSECURITY=)[^;\s\"']+")

# Heuristic: a string value longer than this threshold that looks like raw
# bytes (not valid readable text) is treated as binary.
_BINARY_LENGTH_THRESHOLD = 256


def scrub(text: str, secret: str | None = None) -> str:
    """Return *text* with every occurrence of *secret* masked.

    Any ``.ROBLOSECURITY=<value>`` cookie assignment is masked as well,
    whether or not *secret* is known.

    Parameters
    ----------
    text:
        Arbitrary text, typically a response body.
    secret:
        The credential plaintext to remove.  Empty or ``None`` skips the
        exact-match pass.
    """
    if secret and secret in text:
        placeholder = "<redacted>" if secret not in "<redacted>" else "***"
        text = text.replace(secret, placeholder)
    return _ROBLOSECURITY_RE.sub(lambda m: f"{m.group(1)}<redacted>", text)


def _looks_binary(value: str) -> bool:
    """Heuristic: return True if *value* appears to be raw binary data."""
    if len(value) < _BINARY_LENGTH_THRESHOLD:
        return False
    non_printable = sum(
        1
        for ch in value[:512]
        if not ch.isprintable() and ch not in ("\n", "\r", "\t")
    )
    return non_printable > len(value[:512]) * 0.1


def _redact_value(value: Any, secret: str | None) -> Any:
    """Redact a single value (recursive for dicts / lists)."""
    if isinstance(value, dict):
        return _redact_dict(value, secret)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, secret) for item in value]
    if isinstance(value, str):
        if _looks_binary(value):
            return f"<binary:{len(value.encode('utf-8'))}_bytes>"
        return scrub(value, secret)
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    return value


def _redact_dict(d: dict, secret: str | None) -> dict:
    """Recursively redact a dictionary."""
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, secret)
    return result


def redact(payload: dict, secret: str | None = None) -> dict:
    """Return a deep copy of *payload* with sensitive data redacted.

    Parameters
    ----------
    payload:
        The dictionary to sanitise (request headers, a response body, a
        debug dump).
    secret:
        The credential plaintext.  If supplied, any occurrence of this
        exact string anywhere in the payload is replaced.

    Returns
    -------
    dict
        A new dictionary with all sensitive data removed.  The original
        *payload* is never mutated.

    Examples
    --------
    >>> redact({"x-api-key": "abc123"})
    {'x-api-key': '<redacted>'}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, secret)
