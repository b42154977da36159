"""Keeps CONTRIBUTING.md in sync with the canonical contribution guide."""

from __future__ import annotations

from pathlib import Path

from ..models import RepositorySnapshot
from ..rendering import render_template
from .base import CleanupPass
from .util import make_commit, read_text

CANONICAL_REPO = "ContributionGuide"
CANONICAL_URL = "https://github.com/PolymerElements/ContributionGuide/blob/master/CONTRIBUTING.md"


class ContributingPass(CleanupPass):
    """Copies ``<workspace>/ContributionGuide/CONTRIBUTING.md`` into every repository."""

    name = "contributing"
    runs_by_default = True
    description = "Sync CONTRIBUTING.md from the canonical guide"
    requires = (f"PolymerElements/{CANONICAL_REPO}",)

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        canonical = self.canonical_path(snapshot)
        if not canonical.is_file():
            raise FileNotFoundError(
                f"Couldn't find canonical contribution guide at {canonical}. git checkout error?"
            )
        expected = render_template("contributing_header.md.j2", source_url=CANONICAL_URL)
        expected += canonical.read_text(encoding="utf-8")

        guide_path = snapshot.directory / "CONTRIBUTING.md"
        existed = guide_path.is_file()
        if read_text(guide_path) == expected:
            return
        guide_path.write_text(expected, encoding="utf-8")
        verb = "Update" if existed else "Create"
        await make_commit(snapshot, ["CONTRIBUTING.md"], f"[skip ci] {verb} contribution guide")

    @staticmethod
    def canonical_path(snapshot: RepositorySnapshot) -> Path:
        return snapshot.directory.parent / CANONICAL_REPO / "CONTRIBUTING.md"
