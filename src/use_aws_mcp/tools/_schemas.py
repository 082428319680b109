"""JSON Schema definition and ToolSpec factory for the use_aws tool."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from use_aws_mcp.mcp_runtime import ToolResult, ToolSpec

ToolCallable = Callable[[dict[str, object]], ToolResult | Awaitable[ToolResult]]

USE_AWS_TOOL_NAME = "use_aws"

USE_AWS_SCHEMA = {
    "type": "object",
    "properties": {
        "service_name": {
            "type": "string",
            "minLength": 1,
            "maxLength": 128,
            "description": (
                "The name of the AWS service, as used by the AWS CLI. "
                "Examples: 's3', 'ec2', 'lambda', 'dynamodb'."
            ),
        },
        "operation_name": {
            "type": "string",
            "minLength": 1,
            "maxLength": 128,
            "description": (
                "The name of the CLI operation in kebab-case, e.g. 'list-buckets' or "
                "'describe-instances'. Operations not starting with get, describe, list, "
                "ls, search or batch_get are treated as mutating."
            ),
        },
        "parameters": {
            "type": "object",
            "description": (
                "CLI parameters as key/value pairs. Keys may use any casing and are "
                "converted to kebab-case flags. Use an empty string for flags without "
                "a value. Lists and objects are passed as JSON. "
                "Example: {'instance-ids': 'i-123', 'query': 'Reservations[].Instances[]'}."
            ),
        },
        "region": {
            "type": "string",
            "minLength": 1,
            "maxLength": 64,
            "description": "AWS region code, e.g. 'us-east-1' or 'eu-west-1'.",
        },
        "profile_name": {
            "type": "string",
            "maxLength": 128,
            "description": "Optional AWS CLI profile. Uses the default profile if omitted.",
        },
        "label": {
            "type": "string",
            "maxLength": 256,
            "description": "Short human-readable summary of what the command does.",
        },
        "approved": {
            "type": "boolean",
            "default": False,
            "description": (
                "Set to true only after the user has explicitly accepted a mutating "
                "operation. Without it, mutating operations are rejected and not run."
            ),
        },
    },
    "required": ["service_name", "operation_name", "region"],
    "additionalProperties": False,
}


def make_tool_spec(handler: ToolCallable) -> ToolSpec:
    """Create the use_aws ToolSpec bound to ``handler``."""
    return ToolSpec(
        name=USE_AWS_TOOL_NAME,
        description=(
            "Make an AWS CLI api call with the specified service, operation, and parameters. "
            "All arguments MUST conform to the AWS CLI specification. "
            "Should the output of the invocation indicate a malformed command, invoke help "
            "to obtain the correct command.\n\n"
            "Read-only operations (get*, describe*, list*, ls, search*, batch_get*) run "
            "immediately. Any other operation is rejected until it is resent with "
            "approved=true. The read-only check looks at the operation name only and does "
            "not guarantee that the call has no side effects.\n\n"
            "Examples:\n"
            "1. call(service_name='s3', operation_name='list-buckets', region='us-west-2')\n"
            "2. call(service_name='ec2', operation_name='describe-instances',\n"
            "   region='us-east-1', parameters={'instance-ids': 'i-0123456789abcdef0'})"
        ),
        input_schema=USE_AWS_SCHEMA,
        handler=handler,
    )
