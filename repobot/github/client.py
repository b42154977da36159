"""Repository host client backed by the GitHub CLI (``gh api``)."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

from ..git.client import default_runner
from ..logging import get_logger
from ..models import RepoDescriptor

Runner = Callable[..., str]

_REPO_FIELDS = "{name: .name, owner: .owner.login, clone_url: .clone_url, default_branch: .default_branch}"


class GitHubError(RuntimeError):
    """Raised when the GitHub API returns something we cannot use."""


class GitHubClient:
    """Thin async wrapper over the handful of GitHub endpoints the bot needs."""

    def __init__(self, runner: Runner | None = None, *, cwd: Path | None = None) -> None:
        self._runner = runner or default_runner
        self._cwd = cwd or Path.cwd()
        self._token: str | None = None
        self.logger = get_logger("github")

    def authenticate(self, token: str) -> None:
        """Use ``token`` for every subsequent API call."""
        self._token = token

    async def get_authenticated_user(self) -> str:
        """Return the login of the user owning the token."""
        payload = await self._api_json(["user"])
        login = payload.get("login") if isinstance(payload, dict) else None
        if not isinstance(login, str) or not login:
            raise GitHubError("Could not determine the authenticated GitHub user")
        return login

    async def list_org_repositories(self, org: str) -> List[RepoDescriptor]:
        """Return every repository in ``org``, following pagination."""
        output = await self._api(
            ["--paginate", f"orgs/{org}/repos?per_page=100", "--jq", f".[] | {_REPO_FIELDS}"]
        )
        descriptors: List[RepoDescriptor] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            try:
                descriptors.append(_descriptor_from_dict(json.loads(line)))
            except json.JSONDecodeError as exc:
                raise GitHubError(f"Unexpected repository listing for {org}: {line!r}") from exc
        self.logger.debug("Discovered %d repositories in %s", len(descriptors), org)
        return descriptors

    async def get_repository(self, owner: str, repo: str) -> RepoDescriptor:
        payload = await self._api_json([f"repos/{owner}/{repo}", "--jq", _REPO_FIELDS])
        return _descriptor_from_dict(payload)

    async def create_pull_request(
        self,
        *,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str = "",
    ) -> int:
        """Open a pull request merging ``head`` into ``base``; return its number."""
        payload = await self._api_json(
            [
                "-X",
                "POST",
                f"repos/{owner}/{repo}/pulls",
                "-f",
                f"title={title}",
                "-f",
                f"head={head}",
                "-f",
                f"base={base}",
                "-f",
                f"body={body}",
            ]
        )
        number = payload.get("number") if isinstance(payload, dict) else None
        if not isinstance(number, int):
            raise GitHubError(f"Pull request creation for {owner}/{repo} returned no number")
        return number

    async def edit_issue(
        self,
        *,
        owner: str,
        repo: str,
        number: int,
        assignees: Sequence[str] = (),
        labels: Sequence[str] = (),
    ) -> None:
        """Set assignees and labels on an issue or pull request."""
        args = ["-X", "PATCH", f"repos/{owner}/{repo}/issues/{number}"]
        for assignee in assignees:
            args.extend(["-f", f"assignees[]={assignee}"])
        for label in labels:
            args.extend(["-f", f"labels[]={label}"])
        await self._api(args)

    # ------------------------------------------------------------------
    # Helpers

    async def _api_json(self, args: List[str]) -> Any:
        output = await self._api(args)
        try:
            return json.loads(output)
        except json.JSONDecodeError as exc:
            raise GitHubError(f"GitHub returned invalid JSON for {args}: {output[:200]!r}") from exc

    async def _api(self, args: List[str]) -> str:
        env = os.environ.copy()
        if self._token:
            env["GH_TOKEN"] = self._token
        return await asyncio.to_thread(
            self._runner, ["gh", "api", *args], cwd=self._cwd, env=env, capture_output=True
        )


def _descriptor_from_dict(payload: Any) -> RepoDescriptor:
    if not isinstance(payload, dict):
        raise GitHubError(f"Unexpected repository payload: {payload!r}")
    data: Dict[str, Any] = payload
    owner = data.get("owner")
    if isinstance(owner, dict):
        owner = owner.get("login")
    name = data.get("name")
    clone_url = data.get("clone_url")
    if not all(isinstance(value, str) and value for value in (owner, name, clone_url)):
        raise GitHubError(f"Repository payload is missing owner/name/clone_url: {payload!r}")
    default_branch = data.get("default_branch")
    return RepoDescriptor(
        owner=owner,
        name=name,
        clone_url=clone_url,
        default_branch=default_branch if isinstance(default_branch, str) and default_branch else "master",
    )


__all__ = ["GitHubClient", "GitHubError"]
