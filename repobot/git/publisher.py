"""Push routing: direct push to the target branch, or a reviewed pull request."""

from __future__ import annotations

from typing import Protocol, Sequence

from ..governor import ChangeGovernor, PushVerdict
from ..logging import get_logger
from ..models import PushDisposition, RepositorySnapshot
from ..pacing import Pacer


class PullRequestHost(Protocol):
    async def create_pull_request(
        self, *, owner: str, repo: str, title: str, head: str, base: str, body: str = ""
    ) -> int: ...

    async def edit_issue(
        self,
        *,
        owner: str,
        repo: str,
        number: int,
        assignees: Sequence[str] = (),
        labels: Sequence[str] = (),
    ) -> None: ...


class Publisher:
    """Decides how (and whether) a processed repository reaches the remote."""

    def __init__(
        self,
        host: PullRequestHost,
        governor: ChangeGovernor,
        pacer: Pacer,
        *,
        token: str | None = None,
        title: str = "Automatic cleanup!",
        body: str = "",
        labels: Sequence[str] = ("autogenerated",),
        write_delay: float = 5.0,
    ) -> None:
        self.host = host
        self.governor = governor
        self.pacer = pacer
        self.token = token
        self.title = title
        self.body = body
        self.labels = list(labels)
        self.write_delay = write_delay
        self.logger = get_logger("publisher")

    async def push_changes(
        self,
        snapshot: RepositorySnapshot,
        *,
        local_branch: str,
        target_branch: str,
        assignee: str | None = None,
    ) -> PushDisposition:
        """Push ``snapshot`` if it is dirty and the governor grants a slot.

        Failures are recorded as ``failed`` and re-raised.
        """
        if not snapshot.dirty:
            return snapshot.disposition

        if self.governor.request_push_slot() is PushVerdict.DENIED:
            self.logger.debug("%s: push denied by max_changes", snapshot.identifier)
            snapshot.record_disposition(PushDisposition.DENIED)
            return snapshot.disposition

        try:
            if snapshot.needs_review:
                await snapshot.repository.push_refspec(local_branch, local_branch, self.token)
                await self._open_pull_request(snapshot, local_branch, target_branch, assignee)
            else:
                await snapshot.repository.push_refspec(local_branch, target_branch, self.token)
        except Exception:
            snapshot.record_disposition(PushDisposition.FAILED)
            raise

        snapshot.record_disposition(PushDisposition.SUCCEEDED)
        self.logger.info(
            "%s: pushed %s",
            snapshot.identifier,
            f"for review on {local_branch}" if snapshot.needs_review else f"to {target_branch}",
        )
        return snapshot.disposition

    async def _open_pull_request(
        self,
        snapshot: RepositorySnapshot,
        head: str,
        base: str,
        assignee: str | None,
    ) -> int:
        owner = snapshot.descriptor.owner
        repo = snapshot.descriptor.name
        await self.pacer.wait(self.write_delay)
        number = await self.host.create_pull_request(
            owner=owner, repo=repo, title=self.title, head=head, base=base, body=self.body
        )
        await self.pacer.wait(self.write_delay)
        await self.host.edit_issue(
            owner=owner,
            repo=repo,
            number=number,
            assignees=[assignee] if assignee else [],
            labels=self.labels,
        )
        return number


__all__ = ["Publisher", "PullRequestHost"]
