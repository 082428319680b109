"""The use_aws tool: classify, build and run one AWS CLI command per call."""

from __future__ import annotations

import json
import logging
from enum import Enum

from use_aws_mcp.command.builder import DEFAULT_PROGRAM, build_invocation, render_description
from use_aws_mcp.config import load_settings
from use_aws_mcp.domain.invocation import ExecutionOutcome, InvocationDescriptor, ToolRequest
from use_aws_mcp.errors import ConfigurationError, RejectedOperation, UseAwsError
from use_aws_mcp.execution.process import ProcessRunner, SubprocessRunner
from use_aws_mcp.mcp_runtime import ToolResult
from use_aws_mcp.policy.classifier import Classification, SafetyClassifier, get_classifier
from use_aws_mcp.tools._schemas import USE_AWS_SCHEMA, make_tool_spec
from use_aws_mcp.tools.base import error_response, result_from_payload, validate_or_raise
from use_aws_mcp.utils.masking import redact_sensitive_fields

logger = logging.getLogger(__name__)


class HandlerState(Enum):
    RECEIVED = "received"
    CLASSIFIED = "classified"
    BUILT = "built"
    EXECUTING = "executing"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


TERMINAL_STATES = frozenset({HandlerState.COMPLETED, HandlerState.REJECTED, HandlerState.FAILED})


class ToolHandler:
    """Drive a single use_aws request to a terminal state.

    ``RECEIVED -> CLASSIFIED -> BUILT -> EXECUTING -> COMPLETED``, with
    ``REJECTED`` for mutating operations that were not approved and ``FAILED``
    for invalid requests, parameter errors and launch errors. The runner is
    only reached from ``BUILT``, so rejected and failed requests never spawn
    a process.
    """

    def __init__(
        self,
        payload: dict[str, object],
        *,
        runner: ProcessRunner,
        classifier: SafetyClassifier,
        program: str = DEFAULT_PROGRAM,
    ) -> None:
        self._payload = payload
        self._runner = runner
        self._classifier = classifier
        self._program = program
        self._state = HandlerState.RECEIVED
        self._started = False
        self.request: ToolRequest | None = None
        self.classification: Classification | None = None
        self.description: str | None = None
        self.descriptor: InvocationDescriptor | None = None
        self.outcome: ExecutionOutcome | None = None

    @property
    def state(self) -> HandlerState:
        return self._state

    def _advance(self, state: HandlerState) -> None:
        if self._state in TERMINAL_STATES:
            raise RuntimeError(f"Handler already finished in state {self._state.value}")
        logger.debug("use_aws handler %s -> %s", self._state.value, state.value)
        self._state = state

    async def run(self) -> ToolResult:
        if self._started:
            raise RuntimeError("A ToolHandler serves exactly one request")
        self._started = True

        try:
            request = self._parse_request()
        except ValueError as exc:
            return self._fail(
                "InvalidRequest",
                str(exc),
                hint="Provide service_name, operation_name and region as non-empty strings.",
            )

        try:
            self._classify(request)
            self._build(request)
            outcome = await self._execute()
        except RejectedOperation as exc:
            return self._reject(request, exc)
        except UseAwsError as exc:
            return self._fail(exc.error_type, str(exc), hint=exc.hint)

        return self._complete(request, outcome)

    def _parse_request(self) -> ToolRequest:
        validate_or_raise(USE_AWS_SCHEMA, self._payload)
        request = ToolRequest.model_validate(self._payload)
        self.request = request
        logger.info(
            "use_aws call: %s %s region=%s profile=%s params=%s",
            request.service_name,
            request.operation_name,
            request.region,
            request.profile_name or "default",
            redact_sensitive_fields(request.parameters or {}),
        )
        return request

    def _classify(self, request: ToolRequest) -> None:
        classification = self._classifier.classify(request.operation_name)
        self.classification = classification
        self.description = render_description(request, read_only=classification.read_only)
        self._advance(HandlerState.CLASSIFIED)
        if classification.requires_acceptance and not request.approved:
            raise RejectedOperation(request.service_name, request.operation_name)

    def _build(self, request: ToolRequest) -> None:
        self.descriptor = build_invocation(
            request,
            classifier=self._classifier,
            program=self._program,
        )
        self._advance(HandlerState.BUILT)

    async def _execute(self) -> ExecutionOutcome:
        if self.descriptor is None:
            raise RuntimeError("Invocation must be built before execution")
        self._advance(HandlerState.EXECUTING)
        self.outcome = await self._runner.run(self.descriptor)
        return self.outcome

    def _reject(self, request: ToolRequest, exc: RejectedOperation) -> ToolResult:
        self._advance(HandlerState.REJECTED)
        logger.info(
            "use_aws rejected: %s %s requires acceptance",
            request.service_name,
            request.operation_name,
        )
        description = self.description or ""
        payload: dict[str, object] = {
            "status": HandlerState.REJECTED.value,
            "service": request.service_name,
            "operation": request.operation_name,
            "readOnly": False,
            "requiresAcceptance": True,
            "description": description,
            "message": str(exc),
            "hint": exc.hint,
        }
        text = f"{description}\n\n{exc}\n{exc.hint}"
        return result_from_payload(payload, text=text)

    def _fail(self, error_type: str, message: str, hint: str | None = None) -> ToolResult:
        self._advance(HandlerState.FAILED)
        logger.warning("use_aws failed (%s): %s", error_type, message)
        return error_response(error_type, message, hint=hint)

    def _complete(self, request: ToolRequest, outcome: ExecutionOutcome) -> ToolResult:
        self._advance(HandlerState.COMPLETED)
        read_only = self.descriptor.is_read_only if self.descriptor else False
        logger.info(
            "use_aws completed: %s %s exit=%d truncated=%s",
            request.service_name,
            request.operation_name,
            outcome.exit_code,
            outcome.truncated,
        )
        result = {
            "exitStatus": outcome.exit_code,
            "stdout": outcome.stdout_text,
            "stderr": outcome.stderr_text,
            "truncated": outcome.truncated,
        }
        description = self.description or ""
        payload: dict[str, object] = {
            "status": HandlerState.COMPLETED.value,
            "service": request.service_name,
            "operation": request.operation_name,
            "readOnly": read_only,
            "commandSucceeded": outcome.succeeded,
            "description": description,
            **result,
        }
        text = f"{description}\n\nResult:\n{json.dumps(result, ensure_ascii=False, indent=2)}"
        return result_from_payload(payload, text=text)


async def handle_use_aws(payload: dict[str, object]) -> ToolResult:
    """Entry point registered with the MCP runtime; one handler per call."""
    try:
        settings = load_settings()
        classifier = get_classifier()
    except (RuntimeError, OSError, ValueError) as exc:
        error = ConfigurationError(str(exc))
        logger.error("use_aws unavailable: %s", error)
        return error_response(error.error_type, str(error), hint=error.hint)

    handler = ToolHandler(
        payload,
        runner=SubprocessRunner(max_output_bytes=settings.execution.max_output_bytes),
        classifier=classifier,
        program=settings.execution.cli_binary,
    )
    return await handler.run()


use_aws_tool = make_tool_spec(handle_use_aws)
