"""Base class and registry for cleanup passes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional, Sequence

from ..config import ConfigError
from ..models import RepositorySnapshot


class DuplicatePassError(ConfigError):
    """Raised when two passes are registered under the same name."""


class UnknownPassError(ConfigError):
    """Raised when a pass name does not match any registered pass."""


class CleanupPass(ABC):
    """Contract for a named, idempotent transformation of one repository checkout.

    Subclasses set ``name`` and ``runs_by_default`` as class attributes and
    implement :meth:`apply`. A pass that changes anything must commit the
    change (which marks the snapshot dirty) and must make no change at all
    when run again on its own output.

    ``requires`` names ``owner/name`` repositories the pass reads from; they
    are checked out beside the target repositories whenever the pass runs.
    """

    name: str = ""
    runs_by_default: bool = False
    description: str = ""
    requires: tuple[str, ...] = ()

    @abstractmethod
    async def apply(self, snapshot: RepositorySnapshot) -> None:
        """Transform the checkout behind ``snapshot`` in place."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} default={self.runs_by_default}>"


class PassRegistry:
    """Ordered catalog of cleanup passes keyed by name.

    Registration order is the default execution order.
    """

    def __init__(self, passes: Optional[Sequence[CleanupPass]] = None) -> None:
        self._passes: List[CleanupPass] = []
        self._by_name: Dict[str, CleanupPass] = {}
        for cleanup_pass in passes or ():
            self.register(cleanup_pass)

    def register(self, cleanup_pass: CleanupPass) -> CleanupPass:
        if not isinstance(cleanup_pass, CleanupPass):
            raise TypeError(f"Expected a CleanupPass instance, got {cleanup_pass!r}")
        name = cleanup_pass.name
        if not name:
            raise ConfigError(f"{type(cleanup_pass).__name__} has no name")
        if name in self._by_name:
            raise DuplicatePassError(f"A cleanup pass named '{name}' is already registered")
        self._passes.append(cleanup_pass)
        self._by_name[name] = cleanup_pass
        return cleanup_pass

    def list(self) -> List[CleanupPass]:
        """Return all registered passes in registration order."""
        return list(self._passes)

    def names(self) -> List[str]:
        return [cleanup_pass.name for cleanup_pass in self._passes]

    def get(self, name: str) -> CleanupPass:
        try:
            return self._by_name[name]
        except KeyError:
            known = ", ".join(self.names()) or "none"
            raise UnknownPassError(f"Unknown cleanup pass '{name}' (known passes: {known})") from None

    def defaults(self) -> List[CleanupPass]:
        return [cleanup_pass for cleanup_pass in self._passes if cleanup_pass.runs_by_default]

    def select(self, names: Optional[Sequence[str]] = None) -> List[CleanupPass]:
        """Resolve an explicit ordered selection, or the default passes when None."""
        if names is None:
            return self.defaults()
        unknown = [name for name in names if name not in self._by_name]
        if unknown:
            known = ", ".join(self.names()) or "none"
            raise UnknownPassError(
                f"Unknown cleanup passes requested: {', '.join(unknown)} (known passes: {known})"
            )
        return [self._by_name[name] for name in names]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[CleanupPass]:
        return iter(list(self._passes))

    def __len__(self) -> int:
        return len(self._passes)
