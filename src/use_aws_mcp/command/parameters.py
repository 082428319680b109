"""Conversion of caller-supplied parameters into AWS CLI flags."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping

from use_aws_mcp.errors import ParameterError

_ACRONYM_BOUNDARY = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s_\-]+")

CliFlag = tuple[str, str | None]


def to_kebab_case(name: str) -> str:
    """Convert snake_case, camelCase or PascalCase names to kebab-case.

    Leading ``--`` is dropped so callers may pass flags verbatim. Acronyms stay
    together (``DBInstanceIdentifier`` -> ``db-instance-identifier``) and the
    conversion is idempotent.
    """
    stripped = name.strip().lstrip("-")
    words = _ACRONYM_BOUNDARY.sub(r"\1-\2", stripped)
    words = _CAMEL_BOUNDARY.sub(r"\1-\2", words)
    return _SEPARATORS.sub("-", words).strip("-").lower()


def stringify_value(key: str, value: object) -> str | None:
    """Render one parameter value as CLI argument text.

    ``None`` for empty values means the flag is passed on its own.
    Lists and mappings become compact JSON, which the AWS CLI accepts for
    structure and list parameters.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ParameterError(key, f"non-finite number {value!r}")
        return json.dumps(value)
    if isinstance(value, (list, tuple, dict)):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise ParameterError(key, f"cannot serialize structured value: {exc}") from exc
    raise ParameterError(key, f"unsupported value type '{type(value).__name__}'")


def normalize_parameters(parameters: Mapping[str, object] | None) -> list[CliFlag]:
    """Return ``(flag, value)`` pairs sorted by flag name."""
    if not parameters:
        return []

    flags: dict[str, tuple[str, str | None]] = {}
    for key, value in parameters.items():
        flag = to_kebab_case(str(key))
        if not flag:
            raise ParameterError(str(key), "name is empty after normalization")
        if flag in flags:
            other = flags[flag][0]
            raise ParameterError(str(key), f"duplicates parameter '{other}' as --{flag}")
        flags[flag] = (str(key), stringify_value(str(key), value))

    return [(f"--{flag}", flags[flag][1]) for flag in sorted(flags)]
