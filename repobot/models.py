"""Core data models shared across repobot components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .analysis.elements import DocIndex
    from .git.client import GitRepository


@dataclass(frozen=True)
class RepoDescriptor:
    """Metadata about a repository as reported by the hosting service."""

    owner: str
    name: str
    clone_url: str
    default_branch: str = "master"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class Signature:
    """Author identity recorded on bot commits."""

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


BOT_SIGNATURE = Signature("Repo Maintenance Bot", "repobot@users.noreply.github.com")


class PushDisposition(str, Enum):
    """Final classification of a repository's push attempt."""

    UNPUSHED = "unpushed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DENIED = "denied"


class ReviewLatch:
    """One-way flag: once a change needs review it can never stop needing it."""

    __slots__ = ("_needed",)

    def __init__(self) -> None:
        self._needed = False

    @property
    def needed(self) -> bool:
        return self._needed

    def escalate(self) -> None:
        self._needed = True

    def __bool__(self) -> bool:
        return self._needed

    def __repr__(self) -> str:
        return f"ReviewLatch(needed={self._needed})"


@dataclass(eq=False)
class RepositorySnapshot:
    """Per-repository context threaded through every cleanup pass during one run."""

    directory: Path
    descriptor: RepoDescriptor
    repository: "GitRepository"
    analysis: Optional["DocIndex"] = None
    author: Signature = BOT_SIGNATURE
    commits: List[str] = field(default_factory=list)
    _dirty: bool = field(default=False, init=False, repr=False)
    _review: ReviewLatch = field(default_factory=ReviewLatch, init=False, repr=False)
    _disposition: PushDisposition = field(
        default=PushDisposition.UNPUSHED, init=False, repr=False
    )

    @property
    def identifier(self) -> str:
        """Directory identifier like ``repos/paper-input`` used by blacklists."""
        return f"{self.directory.parent.name}/{self.directory.name}"

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    @property
    def needs_review(self) -> bool:
        return self._review.needed

    @needs_review.setter
    def needs_review(self, value: bool) -> None:
        # Only escalation is honoured; a later pass cannot undo an earlier request.
        if value:
            self._review.escalate()

    def escalate_to_needs_review(self) -> None:
        self._review.escalate()

    @property
    def disposition(self) -> PushDisposition:
        return self._disposition

    def record_disposition(self, disposition: PushDisposition) -> None:
        """Record the terminal push outcome; a second terminal outcome is an error."""
        if disposition is PushDisposition.UNPUSHED:
            raise ValueError("unpushed is the initial disposition and cannot be recorded")
        if self._disposition is not PushDisposition.UNPUSHED:
            raise RuntimeError(
                f"{self.identifier} already has disposition {self._disposition.value}"
            )
        self._disposition = disposition
