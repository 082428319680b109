from __future__ import annotations

import asyncio
import sys

import pytest

from use_aws_mcp import __version__
from use_aws_mcp.domain.invocation import InvocationDescriptor
from use_aws_mcp.errors import LaunchError
from use_aws_mcp.execution import process as process_module
from use_aws_mcp.execution.process import (
    USER_AGENT_ENV_VAR,
    SubprocessRunner,
    _OutputBudget,
    build_child_environment,
    user_agent_marker,
)


def _python(code: str) -> InvocationDescriptor:
    return InvocationDescriptor(program=sys.executable, arguments=("-c", code), is_read_only=True)


@pytest.mark.asyncio
async def test_run_captures_streams_byte_exact() -> None:
    code = (
        "import sys; sys.stdout.buffer.write(b'hello\\n\\xe2\\x9c\\x93'); "
        "sys.stderr.write('warning')"
    )
    outcome = await SubprocessRunner().run(_python(code))

    assert outcome.exit_code == 0
    assert outcome.succeeded is True
    assert outcome.stdout == b"hello\n\xe2\x9c\x93"
    assert outcome.stderr == b"warning"
    assert outcome.truncated is False
    assert outcome.stdout_text == "hello\n✓"


@pytest.mark.asyncio
async def test_non_zero_exit_is_an_outcome() -> None:
    code = "import sys; sys.stderr.write('An error occurred (NoSuchBucket)'); sys.exit(254)"
    outcome = await SubprocessRunner().run(_python(code))

    assert outcome.exit_code == 254
    assert outcome.succeeded is False
    assert outcome.stderr_text == "An error occurred (NoSuchBucket)"


@pytest.mark.asyncio
async def test_output_above_ceiling_is_truncated() -> None:
    code = "import sys; sys.stdout.write('x' * 250000)"
    outcome = await SubprocessRunner(max_output_bytes=100_000).run(_python(code))

    assert outcome.truncated is True
    assert len(outcome.stdout) == 100_000
    assert outcome.stdout == b"x" * 100_000
    assert outcome.exit_code == 0


@pytest.mark.asyncio
async def test_ceiling_applies_to_combined_streams() -> None:
    code = (
        "import sys; sys.stdout.write('o' * 70000); sys.stdout.flush(); "
        "sys.stderr.write('e' * 70000)"
    )
    outcome = await SubprocessRunner(max_output_bytes=100_000).run(_python(code))

    assert outcome.truncated is True
    assert len(outcome.stdout) + len(outcome.stderr) == 100_000


@pytest.mark.asyncio
async def test_output_at_ceiling_is_not_truncated() -> None:
    code = "import sys; sys.stdout.write('y' * 5000)"
    outcome = await SubprocessRunner(max_output_bytes=5000).run(_python(code))

    assert outcome.truncated is False
    assert outcome.stdout == b"y" * 5000


@pytest.mark.asyncio
async def test_child_stdin_is_closed() -> None:
    code = "import sys; print(len(sys.stdin.read()))"
    outcome = await SubprocessRunner().run(_python(code))
    assert outcome.stdout.strip() == b"0"


@pytest.mark.asyncio
async def test_missing_binary_raises_launch_error() -> None:
    descriptor = InvocationDescriptor(
        program="/nonexistent/bin/aws",
        arguments=("s3", "ls", "--region", "us-east-1"),
        is_read_only=True,
    )
    with pytest.raises(LaunchError) as exc_info:
        await SubprocessRunner().run(descriptor)
    assert exc_info.value.program == "/nonexistent/bin/aws"


@pytest.mark.asyncio
async def test_child_receives_user_agent_marker(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(USER_AGENT_ENV_VAR, raising=False)
    code = f"import os; print(os.environ['{USER_AGENT_ENV_VAR}'], end='')"
    outcome = await SubprocessRunner().run(_python(code))
    assert outcome.stdout_text == f"UseAws-MCP-Server Version/{__version__}"


@pytest.mark.asyncio
async def test_cancellation_kills_child(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[asyncio.subprocess.Process] = []
    real_exec = asyncio.create_subprocess_exec

    async def _spy(*args, **kwargs):
        process = await real_exec(*args, **kwargs)
        created.append(process)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _spy)

    task = asyncio.create_task(SubprocessRunner().run(_python("import time; time.sleep(30)")))
    while not created:
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # Reaped before the cancellation propagates.
    assert created[0].returncode is not None
    assert created[0].returncode != 0


@pytest.mark.asyncio
async def test_capture_failure_kills_and_reaps_child(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[asyncio.subprocess.Process] = []
    real_exec = asyncio.create_subprocess_exec

    async def _spy(*args, **kwargs):
        process = await real_exec(*args, **kwargs)
        created.append(process)
        return process

    async def _broken_capture(stream, budget):
        raise RuntimeError("reader failed")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _spy)
    monkeypatch.setattr(process_module, "_capture", _broken_capture)

    with pytest.raises(RuntimeError, match="reader failed"):
        await SubprocessRunner().run(_python("import time; time.sleep(30)"))

    assert created[0].returncode is not None
    assert created[0].returncode != 0


def test_build_child_environment_sets_marker() -> None:
    env = build_child_environment({"PATH": "/usr/bin"})
    assert env[USER_AGENT_ENV_VAR] == user_agent_marker()
    assert env["PATH"] == "/usr/bin"
    assert env["AWS_PAGER"] == ""


def test_build_child_environment_appends_to_existing_marker() -> None:
    env = build_child_environment({USER_AGENT_ENV_VAR: "CloudShell", "AWS_PAGER": "less"})
    assert env[USER_AGENT_ENV_VAR] == f"CloudShell {user_agent_marker()}"
    assert env["AWS_PAGER"] == "less"


def test_build_child_environment_replaces_blank_marker() -> None:
    env = build_child_environment({USER_AGENT_ENV_VAR: "  "})
    assert env[USER_AGENT_ENV_VAR] == user_agent_marker()


def test_output_budget_splits_chunk_at_limit() -> None:
    budget = _OutputBudget(10)
    assert budget.take(b"abcdef") == b"abcdef"
    assert budget.take(b"ghijkl") == b"ghij"
    assert budget.take(b"mn") == b""
    assert budget.truncated is True


def test_runner_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        SubprocessRunner(max_output_bytes=0)
