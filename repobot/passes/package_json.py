"""Generates a minimal package.json from bower.json."""

from __future__ import annotations

from ..models import RepositorySnapshot
from .base import CleanupPass
from .util import logger, make_commit, read_json, read_text, write_json

_COPIED_FIELDS = ("description", "repository", "license")


class PackageJsonPass(CleanupPass):
    """Derives a private npm manifest from bower.json and ignores node_modules.

    Repositories that already have a package.json are left alone.
    """

    name = "package-json"
    runs_by_default = False
    description = "Generate a minimal package.json from bower.json"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        npm_path = snapshot.directory / "package.json"
        if npm_path.exists():
            logger.info("%s already has a package.json, skipping.", snapshot.descriptor.name)
            return

        bower_path = snapshot.directory / "bower.json"
        if not bower_path.is_file():
            raise FileNotFoundError(f"{snapshot.descriptor.name} has no bower.json.")
        bower = read_json(bower_path)
        if not isinstance(bower, dict):
            raise ValueError(f"{snapshot.descriptor.name}: bower.json is not an object")

        package = {"name": f"@polymer/{bower.get('name') or snapshot.descriptor.name}", "private": True}
        for field_name in _COPIED_FIELDS:
            if bower.get(field_name) is not None:
                package[field_name] = bower[field_name]

        gitignore_path = snapshot.directory / ".gitignore"
        gitignore = read_text(gitignore_path)
        if "node_modules" not in gitignore:
            gitignore += "\nnode_modules\n"
            gitignore_path.write_text(gitignore, encoding="utf-8")

        write_json(npm_path, package)
        await make_commit(
            snapshot,
            ["package.json", ".gitignore"],
            "Generate minimal package.json from bower.json",
        )
