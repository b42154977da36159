"""Regenerates README.md from the documentation in the element sources."""

from __future__ import annotations

import re
from typing import List

from ..analysis.elements import DocSymbol
from ..models import RepositorySnapshot
from ..rendering import render_template
from .base import CleanupPass
from .util import make_commit, read_text

# Elements with these prefixes get a page in the element catalog.
_CATALOG_PREFIX = re.compile(r"^(gold|platinum|paper|neon|iron|carbon)-")


class ReadmePass(CleanupPass):
    """Writes a README built from element and behavior doc comments."""

    name = "readme"
    runs_by_default = True
    description = "Generate README.md from element documentation"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        contents = self.render(snapshot)
        readme_path = snapshot.directory / "README.md"
        if read_text(readme_path) == contents:
            return
        readme_path.write_text(contents, encoding="utf-8")
        await make_commit(snapshot, ["README.md"], "[skip ci] Autogenerate README file.")

    def render(self, snapshot: RepositorySnapshot) -> str:
        analysis = snapshot.analysis
        if analysis is None:
            raise RuntimeError(f"{snapshot.identifier}: documentation analysis has not run")
        repo_name = snapshot.descriptor.name
        elements = _order_elements(analysis.elements_in(snapshot.directory), repo_name)
        behaviors = sorted(analysis.behaviors_in(snapshot.directory), key=lambda symbol: symbol.name)
        files = sorted({symbol.source.name for symbol in [*elements, *behaviors]})
        return render_template(
            "readme.md.j2",
            files=files,
            owner=snapshot.descriptor.owner,
            repo_name=repo_name,
            build_badge=(snapshot.directory / ".travis.yml").is_file(),
            catalog_link=bool(_CATALOG_PREFIX.match(repo_name)),
            elements=elements,
            behaviors=behaviors,
        )


def _order_elements(elements: List[DocSymbol], repo_name: str) -> List[DocSymbol]:
    # The element the repository is named after comes first, the rest alphabetically.
    return sorted(elements, key=lambda symbol: (symbol.name != repo_name, symbol.name))
