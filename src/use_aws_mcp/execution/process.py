"""Child-process execution of AWS CLI invocations."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from collections.abc import Mapping
from typing import Protocol

from use_aws_mcp import __version__
from use_aws_mcp.config import DEFAULT_MAX_OUTPUT_BYTES
from use_aws_mcp.domain.invocation import ExecutionOutcome, InvocationDescriptor
from use_aws_mcp.errors import LaunchError

logger = logging.getLogger(__name__)

# The AWS CLI appends this variable to its user agent.
USER_AGENT_ENV_VAR = "AWS_EXECUTION_ENV"
USER_AGENT_APP_NAME = "UseAws-MCP-Server"
USER_AGENT_VERSION_KEY = "Version"

_READ_CHUNK_SIZE = 64 * 1024


class ProcessRunner(Protocol):
    async def run(self, descriptor: InvocationDescriptor) -> ExecutionOutcome: ...


def user_agent_marker() -> str:
    return f"{USER_AGENT_APP_NAME} {USER_AGENT_VERSION_KEY}/{__version__}"


def build_child_environment(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Copy ``base`` (the server environment by default) for the child process.

    The user-agent marker is appended to any existing ``AWS_EXECUTION_ENV``
    value, and the CLI pager is disabled unless explicitly configured.
    """
    env = dict(os.environ if base is None else base)
    marker = user_agent_marker()
    existing = env.get(USER_AGENT_ENV_VAR, "").strip()
    env[USER_AGENT_ENV_VAR] = f"{existing} {marker}" if existing else marker
    env.setdefault("AWS_PAGER", "")
    return env


class _OutputBudget:
    """Combined byte allowance shared by the stdout and stderr readers."""

    def __init__(self, limit: int) -> None:
        self.remaining = limit
        self.truncated = False

    def take(self, chunk: bytes) -> bytes:
        if len(chunk) <= self.remaining:
            self.remaining -= len(chunk)
            return chunk
        kept = chunk[: self.remaining]
        self.remaining = 0
        self.truncated = True
        return kept


async def _capture(stream: asyncio.StreamReader | None, budget: _OutputBudget) -> bytes:
    if stream is None:
        return b""
    captured = bytearray()
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            break
        # Keep draining after the budget is spent so the child never blocks on a full pipe.
        captured.extend(budget.take(chunk))
    return bytes(captured)


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()


class SubprocessRunner:
    """Run invocations with ``asyncio`` subprocesses and bounded output capture."""

    def __init__(
        self,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        env: Mapping[str, str] | None = None,
    ) -> None:
        if max_output_bytes < 1:
            raise ValueError("max_output_bytes must be positive")
        self._max_output_bytes = max_output_bytes
        self._env = dict(env) if env is not None else None

    @property
    def max_output_bytes(self) -> int:
        return self._max_output_bytes

    async def run(self, descriptor: InvocationDescriptor) -> ExecutionOutcome:
        env = self._env if self._env is not None else build_child_environment()
        try:
            process = await asyncio.create_subprocess_exec(
                *descriptor.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as exc:
            raise LaunchError(descriptor.program, exc.strerror or str(exc)) from exc

        logger.debug("Spawned %s (pid %s)", descriptor.program, process.pid)
        budget = _OutputBudget(self._max_output_bytes)
        try:
            stdout, stderr = await asyncio.gather(
                _capture(process.stdout, budget),
                _capture(process.stderr, budget),
            )
            exit_code = await process.wait()
        except asyncio.CancelledError:
            logger.warning(
                "Invocation cancelled; killing %s (pid %s)", descriptor.program, process.pid
            )
            raise
        finally:
            if process.returncode is None:
                _kill(process)
                await asyncio.shield(process.wait())

        if budget.truncated:
            logger.warning(
                "Output of %s exceeded %d bytes and was truncated",
                descriptor.program,
                self._max_output_bytes,
            )
        return ExecutionOutcome(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            truncated=budget.truncated,
        )
