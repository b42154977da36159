"""Configures headless browsers for web-component-tester."""

from __future__ import annotations

from ..models import RepositorySnapshot
from .base import CleanupPass
from .util import dump_json, make_commit, read_json, read_text

# Chrome's sandbox does not work on the CI images.
CHROME_SANDBOX = ["no-sandbox"]
CHROME_HEADLESS = ["headless", "disable-gpu"]
FIREFOX_HEADLESS = ["-headless"]


class WctConfPass(CleanupPass):
    name = "wct-conf"
    runs_by_default = False
    description = "Run web-component-tester browsers headless (always reviewed)"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        config_path = snapshot.directory / "wct.conf.json"
        original = read_text(config_path)
        config = read_json(config_path) if original else {}
        if not isinstance(config, dict):
            raise ValueError(f"{snapshot.identifier}: wct.conf.json is not an object")

        plugins = config.get("plugins")
        plugins = dict(plugins) if isinstance(plugins, dict) else {}
        plugins["local"] = {
            "browserOptions": {
                "chrome": [*CHROME_SANDBOX, *CHROME_HEADLESS],
                "firefox": list(FIREFOX_HEADLESS),
            }
        }
        config["plugins"] = plugins

        updated = dump_json(config)
        if updated == original:
            return
        snapshot.escalate_to_needs_review()
        config_path.write_text(updated, encoding="utf-8")
        await make_commit(snapshot, ["wct.conf.json"], "Update WCT config")
