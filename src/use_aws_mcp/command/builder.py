"""Assembly of AWS CLI invocations and their human-readable descriptions."""

from __future__ import annotations

import json

from use_aws_mcp.command.parameters import normalize_parameters
from use_aws_mcp.domain.invocation import InvocationDescriptor, ToolRequest
from use_aws_mcp.policy.classifier import SafetyClassifier

DEFAULT_PROGRAM = "aws"


def build_arguments(request: ToolRequest) -> tuple[str, ...]:
    arguments = [
        request.service_name,
        request.operation_name,
        "--region",
        request.region,
    ]
    if request.profile_name:
        arguments.extend(["--profile", request.profile_name])
    for flag, value in normalize_parameters(request.parameters):
        arguments.append(flag)
        if value is not None:
            arguments.append(value)
    return tuple(arguments)


def build_invocation(
    request: ToolRequest,
    *,
    classifier: SafetyClassifier,
    program: str = DEFAULT_PROGRAM,
) -> InvocationDescriptor:
    """Compose the argument vector for ``request``.

    Raises:
        ParameterError: when a parameter value cannot be rendered as CLI text.
    """
    return InvocationDescriptor(
        program=program,
        arguments=build_arguments(request),
        is_read_only=classifier.is_read_only(request.operation_name),
    )


def _describe_value(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, default=repr)


def render_description(request: ToolRequest, *, read_only: bool) -> str:
    """Render an audit-friendly description of the command ``request`` runs."""
    lines = [
        "Running aws cli command:",
        "",
        f"Service name: {request.service_name}",
        f"Operation name: {request.operation_name}",
    ]
    if request.parameters:
        lines.append("Parameters:")
        for name in sorted(request.parameters):
            value = request.parameters[name]
            if value == "" or value is None:
                lines.append(f"- {name}")
            else:
                lines.append(f"- {name}: {_describe_value(value)}")
    lines.append(f"Profile name: {request.profile_name or 'default'}")
    lines.append(f"Region: {request.region}")
    if request.label:
        lines.append(f"Label: {request.label}")
    lines.append("Mode: read-only" if read_only else "Mode: write (requires acceptance)")
    return "\n".join(lines)
