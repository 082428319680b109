"""Masking of sensitive parameter values before they reach the logs."""

from __future__ import annotations

_MAX_REDACT_DEPTH = 20

# Matched as substrings of the key with case, hyphens and underscores ignored.
SENSITIVE_KEY_MARKERS: tuple[str, ...] = (
    "password",
    "secret",
    "token",
    "accesskey",
    "privatekey",
    "credential",
    "authorization",
    "apikey",
)


def _is_sensitive_key(key: object) -> bool:
    compact = str(key).lower().replace("-", "").replace("_", "")
    return any(marker in compact for marker in SENSITIVE_KEY_MARKERS)


def redact_sensitive_fields(
    value: object,
    *,
    mask: str = "***",
    depth: int = 0,
    max_depth: int = _MAX_REDACT_DEPTH,
) -> object:
    """Recursively replace sensitive values in dicts/lists.

    When ``max_depth`` is exceeded the entire sub-tree is replaced with *mask*.
    """
    if depth >= max_depth:
        return mask
    if isinstance(value, dict):
        redacted: dict[object, object] = {}
        for key, val in value.items():
            if _is_sensitive_key(key):
                redacted[key] = mask
            else:
                redacted[key] = redact_sensitive_fields(
                    val, mask=mask, depth=depth + 1, max_depth=max_depth,
                )
        return redacted
    if isinstance(value, (list, tuple)):
        return [
            redact_sensitive_fields(
                item, mask=mask, depth=depth + 1, max_depth=max_depth,
            )
            for item in value
        ]
    return value
