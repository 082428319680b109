"""Safety policy configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_READ_ONLY_PREFIXES: tuple[str, ...] = (
    "get",
    "describe",
    "list",
    "ls",
    "search",
    "batch_get",
)


class SafetyPolicy(BaseModel):
    version: int = Field(default=1)
    read_only_prefixes: tuple[str, ...] = Field(default=DEFAULT_READ_ONLY_PREFIXES)

    @field_validator("read_only_prefixes", mode="before")
    @classmethod
    def _validate_prefixes(cls, v: Any) -> Any:
        if v is None:
            return DEFAULT_READ_ONLY_PREFIXES
        if isinstance(v, str):
            raise ValueError("read_only_prefixes must be a list of strings")
        return v

    @field_validator("read_only_prefixes")
    @classmethod
    def _reject_blank_prefixes(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(prefix.strip() for prefix in v)
        if any(not prefix for prefix in cleaned):
            raise ValueError("read_only_prefixes must not contain blank entries")
        return cleaned

    @classmethod
    def from_yaml(cls, data: dict[str, object]) -> "SafetyPolicy":
        return cls.model_validate(data)
