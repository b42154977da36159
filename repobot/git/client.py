"""Git working-tree operations backed by the git CLI."""

from __future__ import annotations

import asyncio
import os
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from ..logging import get_logger
from ..models import Signature

Runner = Callable[..., str]

_TOKEN_ENV = "REPOBOT_GIT_TOKEN"
# Credential helper that answers with the token from the environment so the
# token never appears on the command line.
_CREDENTIAL_HELPER = (
    "!f() { echo username=x-access-token; echo \"password=$" + _TOKEN_ENV + "\"; }; f"
)


class GitError(RuntimeError):
    """Raised when a path is not a usable git checkout."""


def default_runner(
    args: Iterable[str],
    *,
    cwd: Path,
    env: dict[str, str] | None = None,
    capture_output: bool = False,
) -> str:
    completed = subprocess.run(
        list(args),
        cwd=str(cwd),
        env=env,
        check=True,
        text=True,
        capture_output=capture_output,
    )
    if capture_output:
        return completed.stdout
    return ""


class GitClient:
    """Opens and clones repositories; hands out per-checkout handles."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or default_runner
        self.logger = get_logger("git")

    def open(self, path: Path) -> "GitRepository":
        """Return a handle for an existing checkout."""
        path = Path(path)
        if not (path / ".git").exists():
            raise GitError(f"{path} is not a git checkout")
        return GitRepository(path, self._runner)

    async def clone(self, url: str, path: Path) -> "GitRepository":
        """Clone ``url`` into ``path`` and return a handle for it."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.logger.debug("Cloning %s into %s", url, path)
        await asyncio.to_thread(
            self._runner, ["git", "clone", "--quiet", url, str(path)], cwd=path.parent
        )
        return GitRepository(path, self._runner)


class GitRepository:
    """Handle for one checkout. Owned by exactly one snapshot."""

    def __init__(self, path: Path, runner: Runner) -> None:
        self.path = Path(path)
        self._runner = runner

    async def create_branch_from_head(self, name: str) -> None:
        """Create (or reset) ``name`` at the current HEAD and check it out."""
        await self._run_async(["git", "checkout", "--quiet", "-B", name])

    async def checkout_branch(self, name: str) -> None:
        await self._run_async(["git", "checkout", "--quiet", name])

    async def commit_files(
        self, files: Sequence[Path | str], author: Signature, message: str
    ) -> str:
        """Stage ``files`` and commit them on HEAD; return the new commit id."""
        relative = [self._to_relative(Path(file)) for file in files]
        await self._run_async(["git", "add", "--all", "--", *relative])

        env = os.environ.copy()
        env["GIT_AUTHOR_NAME"] = author.name
        env["GIT_AUTHOR_EMAIL"] = author.email
        env["GIT_COMMITTER_NAME"] = author.name
        env["GIT_COMMITTER_EMAIL"] = author.email
        await self._run_async(["git", "commit", "--quiet", "-m", message], env=env)

        output = await self._run_async(["git", "rev-parse", "HEAD"], capture_output=True)
        return output.strip()

    async def push_refspec(self, local: str, remote: str, token: str | None = None) -> None:
        """Push ``refs/heads/<local>`` to ``refs/heads/<remote>`` on origin."""
        refspec = f"refs/heads/{local}:refs/heads/{remote}"
        args = ["git"]
        env = None
        if token:
            env = os.environ.copy()
            env[_TOKEN_ENV] = token
            args.extend(["-c", "credential.helper=", "-c", f"credential.helper={_CREDENTIAL_HELPER}"])
        args.extend(["push", "--quiet", "origin", refspec])
        await self._run_async(args, env=env)

    async def changed_files(self) -> List[str]:
        """Return paths reported by ``git status --porcelain``."""
        output = await self._run_async(["git", "status", "--porcelain"], capture_output=True)
        paths: List[str] = []
        for line in output.splitlines():
            if len(line) < 4:
                continue
            entry = line[3:]
            if " -> " in entry:
                entry = entry.split(" -> ", 1)[1]
            paths.append(entry.strip('"'))
        return paths

    # ------------------------------------------------------------------
    # Helpers

    def _to_relative(self, file_path: Path) -> str:
        if not file_path.is_absolute():
            return file_path.as_posix()
        try:
            return file_path.relative_to(self.path).as_posix()
        except ValueError:
            return file_path.as_posix()

    async def _run_async(
        self,
        args: List[str],
        *,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        return await asyncio.to_thread(
            self._runner, args, cwd=self.path, env=env, capture_output=capture_output
        )

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"


__all__ = ["GitClient", "GitError", "GitRepository", "default_runner"]
