"""Tool helpers."""

from __future__ import annotations

import json

from use_aws_mcp.mcp_runtime import ToolResult
from use_aws_mcp.utils.jsonschema import validate_payload


def validate_or_raise(schema: dict[str, object], payload: dict[str, object]) -> None:
    errors = validate_payload(schema, payload)
    if errors:
        raise ValueError("Input validation failed: " + "; ".join(errors))


def result_from_payload(payload: dict[str, object], text: str | None = None) -> ToolResult:
    if text is None:
        text = json.dumps(payload, ensure_ascii=False, indent=2)
    content = [{"type": "text", "text": text}]
    return ToolResult(content=content, structured_content=payload)


def error_response(
    error_type: str,
    message: str,
    hint: str | None = None,
    retryable: bool = False,
) -> ToolResult:
    """Create a standardized error response."""
    error: dict[str, object] = {
        "type": error_type,
        "message": message,
    }
    if hint:
        error["hint"] = hint
    error["retryable"] = retryable

    return result_from_payload({"error": error})
