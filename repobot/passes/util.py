"""Helpers shared by the built-in cleanup passes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from ..logging import get_logger
from ..models import RepositorySnapshot

logger = get_logger("passes")


async def make_commit(
    snapshot: RepositorySnapshot, files: Sequence[Path | str], message: str
) -> str:
    """Mark the snapshot dirty and commit ``files`` on its current branch."""
    snapshot.mark_dirty()
    commit_id = await snapshot.repository.commit_files(files, snapshot.author, message)
    snapshot.commits.append(commit_id)
    logger.debug("%s: committed %s (%s)", snapshot.identifier, commit_id[:12], message)
    return commit_id


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def dump_json(data: Any) -> str:
    """Serialise ``data`` the way the config files in the fleet are formatted."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def write_json(path: Path, data: Any) -> None:
    path.write_text(dump_json(data) + "\n", encoding="utf-8")


def read_text(path: Path) -> str:
    """Return file contents, or an empty string when the file does not exist."""
    if not path.is_file():
        return ""
    return path.read_text(encoding="utf-8")


__all__ = ["dump_json", "make_commit", "read_json", "read_text", "write_json"]
