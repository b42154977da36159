"""End-of-run report partitioning repositories by push disposition."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .governor import ChangeGovernor
from .models import PushDisposition, RepositorySnapshot

_SECTIONS = (
    (PushDisposition.DENIED, "Repositories that would have been pushed:"),
    (PushDisposition.SUCCEEDED, "Repositories pushed successfully:"),
    (PushDisposition.FAILED, "Repositories that I tried to push that FAILED:"),
)


@dataclass
class RunReport:
    """Which repositories ended up where, plus the governor's counters."""

    max_changes: int
    pushed: int
    denied: int
    by_disposition: Dict[PushDisposition, List[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, snapshots: Iterable[RepositorySnapshot], governor: ChangeGovernor) -> "RunReport":
        by_disposition: Dict[PushDisposition, List[str]] = {disposition: [] for disposition, _ in _SECTIONS}
        for snapshot in snapshots:
            if snapshot.disposition in by_disposition:
                by_disposition[snapshot.disposition].append(snapshot.identifier)
        return cls(
            max_changes=governor.max_changes,
            pushed=governor.pushed,
            denied=governor.denied,
            by_disposition=by_disposition,
        )

    def identifiers(self, disposition: PushDisposition) -> List[str]:
        return list(self.by_disposition.get(disposition, []))

    def summary(self) -> str:
        if self.pushed == 0 and self.denied == 0:
            return "No changes needed!"
        if self.denied == 0:
            return f"Successfully pushed to {self.pushed} repos."
        if self.max_changes == 0:
            return (
                f"{self.denied} changes ready to push. "
                f"Call with --max-changes=N to push them up!"
            )
        return f"Successfully pushed to {self.pushed} repos. {self.denied} remain."

    def render(self, *, include_summary: bool = True) -> List[str]:
        lines: List[str] = []
        for disposition, heading in _SECTIONS:
            identifiers = self.by_disposition.get(disposition) or []
            if not identifiers:
                continue
            lines.append("")
            lines.append(heading)
            lines.extend(f"    {identifier}" for identifier in identifiers)
        if include_summary:
            lines.append("")
            lines.append(self.summary())
        return lines


__all__ = ["RunReport"]
