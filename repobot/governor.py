"""Run-wide ceiling on how many repositories may be pushed."""

from __future__ import annotations

from enum import Enum


class PushVerdict(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


class ChangeGovernor:
    """Counting gate: grants at most ``max_changes`` push slots per run.

    The default ceiling of 0 reports what would change without pushing.
    """

    def __init__(self, max_changes: int = 0) -> None:
        if max_changes < 0:
            raise ValueError("max_changes must be non-negative")
        self.max_changes = max_changes
        self.pushed = 0
        self.denied = 0

    def request_push_slot(self) -> PushVerdict:
        """Call once per dirty repository, after its passes and before any push."""
        if self.pushed < self.max_changes:
            self.pushed += 1
            return PushVerdict.ALLOWED
        self.denied += 1
        return PushVerdict.DENIED

    @property
    def remaining(self) -> int:
        return self.max_changes - self.pushed


__all__ = ["ChangeGovernor", "PushVerdict"]
