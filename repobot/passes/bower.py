"""Fixes common bower.json problems."""

from __future__ import annotations

from ..models import RepositorySnapshot
from .base import CleanupPass
from .util import logger, make_commit, read_json, write_json


class BowerPass(CleanupPass):
    """Cleans up a missing ``main``, a one-element ``main`` list and a missing ``ignore``."""

    name = "bower"
    runs_by_default = True
    description = "Normalise main/ignore fields in bower.json"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        bower_path = snapshot.directory / "bower.json"
        if not bower_path.is_file():
            return
        config = read_json(bower_path)
        if not isinstance(config, dict):
            logger.debug("%s: bower.json is not an object, skipping", snapshot.identifier)
            return

        main = config.get("main")
        if not main:
            element_file = f"{snapshot.directory.name}.html"
            if (snapshot.directory / element_file).is_file():
                config["main"] = element_file
                write_json(bower_path, config)
                await make_commit(snapshot, ["bower.json"], "Add bower main file.")

        main = config.get("main")
        if isinstance(main, list) and len(main) == 1:
            config["main"] = main[0]
            write_json(bower_path, config)
            await make_commit(
                snapshot, ["bower.json"], "Convert bower main from array to string."
            )

        if config.get("ignore") is None:
            config["ignore"] = []
            write_json(bower_path, config)
            await make_commit(snapshot, ["bower.json"], "Add an ignore property to bower.json.")
