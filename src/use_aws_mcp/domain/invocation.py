"""Domain objects for a single use_aws invocation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ToolRequest(BaseModel):
    """Arguments of one ``use_aws`` tool call."""

    service_name: str = Field(min_length=1)
    operation_name: str = Field(min_length=1)
    parameters: dict[str, Any] | None = None
    region: str = Field(min_length=1)
    profile_name: str | None = None
    label: str | None = None
    approved: bool = False

    @field_validator("service_name", "operation_name", "region")
    @classmethod
    def _require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("profile_name", "label")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


@dataclass(frozen=True)
class InvocationDescriptor:
    program: str
    arguments: tuple[str, ...]
    is_read_only: bool

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.program, *self.arguments)


@dataclass(frozen=True)
class ExecutionOutcome:
    exit_code: int
    stdout: bytes
    stderr: bytes
    truncated: bool

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")
