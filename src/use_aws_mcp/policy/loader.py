"""Policy loader for the optional safety policy YAML file."""

from __future__ import annotations

from pathlib import Path

import yaml

from use_aws_mcp.policy.models import SafetyPolicy


def load_policy(path: str | None) -> SafetyPolicy:
    if path is None:
        return SafetyPolicy()
    policy_path = Path(path)
    if not policy_path.exists():
        raise FileNotFoundError(f"Policy file not found: {policy_path}")
    with policy_path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Policy file is not valid YAML: {policy_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Policy file must contain a mapping: {policy_path}")
    return SafetyPolicy.from_yaml(data)
