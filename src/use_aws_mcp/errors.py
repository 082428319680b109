"""Exceptions raised along the use_aws invocation pipeline."""

from __future__ import annotations


class UseAwsError(Exception):
    """Base exception for use_aws tool failures."""

    error_type = "UseAwsError"
    hint: str | None = None


class ParameterError(UseAwsError):
    """Raised when a caller-supplied parameter cannot become a CLI argument."""

    error_type = "ParameterError"
    hint = "Provide parameter values as strings, numbers, booleans, lists or objects."

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid parameter '{key}': {reason}")


class LaunchError(UseAwsError):
    """Raised when the CLI binary cannot be spawned."""

    error_type = "LaunchError"
    hint = "Check that the AWS CLI is installed and on PATH, or set USE_AWS_CLI_BINARY."

    def __init__(self, program: str, reason: str):
        self.program = program
        self.reason = reason
        super().__init__(f"Unable to launch '{program}': {reason}")


class RejectedOperation(UseAwsError):
    """Raised when a mutating operation arrives without caller acceptance."""

    error_type = "RejectedOperation"
    hint = "Confirm the operation with the user, then resend it with approved=true."

    def __init__(self, service: str, operation: str):
        self.service = service
        self.operation = operation
        super().__init__(
            f"Operation '{service} {operation}' may modify AWS resources and requires "
            "explicit acceptance before it runs."
        )


class ConfigurationError(UseAwsError):
    """Raised when server settings or the safety policy cannot be loaded."""

    error_type = "ConfigurationError"
    hint = "Check POLICY_PATH, LOG_FILE and the USE_AWS_* environment variables."
