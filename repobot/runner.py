"""Applies an ordered selection of cleanup passes to one repository."""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from .config import PassConfig
from .logging import get_logger
from .models import RepositorySnapshot
from .passes.base import CleanupPass, PassRegistry


class PassRunner:
    """Runs passes strictly in sequence, honouring per-pass blacklists."""

    def __init__(
        self,
        registry: PassRegistry,
        config: Optional[Mapping[str, PassConfig]] = None,
    ) -> None:
        self.registry = registry
        self.config = dict(config or {})
        self.logger = get_logger("runner")

    def resolve(self, names: Optional[Sequence[str]] = None) -> List[CleanupPass]:
        """Return the passes to run: ``names`` in order, or the defaults when None."""
        return self.registry.select(names)

    def is_blacklisted(self, cleanup_pass: CleanupPass, snapshot: RepositorySnapshot) -> bool:
        settings = self.config.get(cleanup_pass.name)
        return settings is not None and snapshot.identifier in settings.blacklist

    async def run(
        self,
        snapshot: RepositorySnapshot,
        names: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """Apply the selected passes to ``snapshot`` and return the names that ran.

        The first failing pass aborts the repository; commits made by earlier
        passes are kept.
        """
        executed: List[str] = []
        for cleanup_pass in self.resolve(names):
            if self.is_blacklisted(cleanup_pass, snapshot):
                self.logger.debug("%s: pass %s skipped (blacklisted)", snapshot.identifier, cleanup_pass.name)
                continue
            self.logger.debug("%s: running pass %s", snapshot.identifier, cleanup_pass.name)
            await cleanup_pass.apply(snapshot)
            executed.append(cleanup_pass.name)
        return executed


__all__ = ["PassRunner"]
