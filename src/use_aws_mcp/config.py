"""Configuration management for the use_aws MCP server."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

_config_logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_BYTES = 100_000


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ExecutionSettings(BaseModel):
    cli_binary: str = Field(default="aws", min_length=1)
    max_output_bytes: int = Field(
        default=DEFAULT_MAX_OUTPUT_BYTES,
        ge=1_000,
        le=10_000_000,
        description="Ceiling on combined stdout/stderr bytes captured per invocation.",
    )


class PolicySettings(BaseModel):
    path: str | None = Field(
        default=None,
        description="Optional YAML file overriding the read-only operation prefixes.",
    )


class ServerSettings(BaseModel):
    instructions: str = Field(
        default=(
            "Use the use_aws tool to run AWS CLI operations. "
            "Read-only operations run immediately; any other operation must be "
            "resent with approved=true after the user accepts it."
        )
    )

    @field_validator("instructions")
    @classmethod
    def _strip_instructions(cls, value: str) -> str:
        return value.strip()


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)


ENV_KEYS = {
    "instructions": "MCP_INSTRUCTIONS",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
    "cli_binary": "USE_AWS_CLI_BINARY",
    "max_output_bytes": "USE_AWS_MAX_OUTPUT_BYTES",
    "policy_path": "POLICY_PATH",
}


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    """Return ``path`` resolved. Relative paths must stay inside the project root."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return str(candidate.resolve())
    root = _project_root().resolve()
    resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        raise ValueError(f"Path traversal detected: '{path}' resolves outside project root")
    return str(resolved)


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_path(key: str) -> str | None:
    value = os.getenv(key, "").strip()
    if not value:
        return None
    return _resolve_path(value)


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")

    try:
        settings_data = _collect_settings_data()
        return Settings.model_validate(settings_data)
    except ValueError as exc:
        # Covers pydantic ValidationError and rejected paths.
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


def _collect_settings_data() -> dict[str, object]:
    return {
        "server": {
            "instructions": os.getenv(ENV_KEYS["instructions"], ServerSettings().instructions),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _env_path(ENV_KEYS["log_file"]),
        },
        "execution": {
            "cli_binary": os.getenv(ENV_KEYS["cli_binary"], ExecutionSettings().cli_binary),
            "max_output_bytes": _env_int(
                ENV_KEYS["max_output_bytes"],
                ExecutionSettings().max_output_bytes,
            ),
        },
        "policy": {
            "path": _env_path(ENV_KEYS["policy_path"]),
        },
    }
