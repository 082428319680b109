"""Read-only vs. mutating classification of AWS CLI operations.

The check is a name heuristic: an operation counts as read-only when its name
starts, on a word boundary, with one of the configured prefixes. It does not
inspect what the target API actually does, so a misleadingly named operation
is classified by its name alone.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

from use_aws_mcp.command.parameters import to_kebab_case
from use_aws_mcp.config import load_settings
from use_aws_mcp.policy.loader import load_policy
from use_aws_mcp.policy.models import DEFAULT_READ_ONLY_PREFIXES


@dataclass(frozen=True)
class Classification:
    operation: str
    read_only: bool
    matched_prefix: str | None = None

    @property
    def requires_acceptance(self) -> bool:
        return not self.read_only


class SafetyClassifier:
    def __init__(self, prefixes: Iterable[str] = DEFAULT_READ_ONLY_PREFIXES) -> None:
        self._prefixes = tuple(prefixes)
        self._prefix_words = tuple(
            (prefix, tuple(to_kebab_case(prefix).split("-"))) for prefix in self._prefixes
        )

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    def classify(self, operation_name: str) -> Classification:
        words = tuple(to_kebab_case(operation_name).split("-"))
        for prefix, prefix_words in self._prefix_words:
            if words[: len(prefix_words)] == prefix_words:
                return Classification(operation_name, read_only=True, matched_prefix=prefix)
        return Classification(operation_name, read_only=False)

    def is_read_only(self, operation_name: str) -> bool:
        return self.classify(operation_name).read_only


@lru_cache(maxsize=1)
def get_classifier() -> SafetyClassifier:
    """Return the process-wide classifier built from the configured policy."""
    policy = load_policy(load_settings().policy.path)
    return SafetyClassifier(policy.read_only_prefixes)
