"""Normalises .travis.yml across the fleet."""

from __future__ import annotations

from typing import Any, Dict, List

import yaml

from ..models import RepositorySnapshot
from .base import CleanupPass
from .util import logger, make_commit

TOOLS = ("bower", "polylint", "web-component-tester")
BEFORE_SCRIPT = [f"npm install -g {' '.join(TOOLS)}", "bower install", "polylint"]

CHROME_SOURCE = "google-chrome"
CHROME_PACKAGE = "google-chrome-stable"

# Toolchain entries only needed before the trusty images.
C11_SOURCE = "ubuntu-toolchain-r-test"
C11_PACKAGE = "g++-4.8"
C11_ENV = "CXX=g++-4.8"


class TravisPass(CleanupPass):
    """Rewrites the Travis config into the fleet's standard shape.

    Changes to CI configuration always go through review.
    """

    name = "travis"
    runs_by_default = True
    description = "Normalise .travis.yml (always reviewed)"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        travis_path = snapshot.directory / ".travis.yml"
        if not travis_path.is_file():
            return

        original = travis_path.read_text(encoding="utf-8")
        config = yaml.safe_load(original)
        if not isinstance(config, dict):
            logger.debug("%s: .travis.yml is not a mapping, skipping", snapshot.identifier)
            return

        updated = dump_travis(normalise_travis(config))
        if updated == original:
            return
        snapshot.escalate_to_needs_review()
        travis_path.write_text(updated, encoding="utf-8")
        await make_commit(snapshot, [".travis.yml"], "Update travis config")


def normalise_travis(travis: Dict[str, Any]) -> Dict[str, Any]:
    """Apply the fleet's Travis conventions to a parsed config, in place."""
    # A leading subset of the standard steps is kept as is; anything else is replaced.
    before_script = travis.get("before_script")
    if isinstance(before_script, list) and before_script != BEFORE_SCRIPT[: len(before_script)]:
        travis["before_script"] = list(BEFORE_SCRIPT)

    travis["dist"] = "trusty"
    travis["sudo"] = "required"
    travis["node_js"] = "stable"

    addons = travis.get("addons")
    if not isinstance(addons, dict):
        addons = {}
        travis["addons"] = addons
    if not addons.get("firefox"):
        addons["firefox"] = "latest"
    addons["sauce_connect"] = True

    apt = addons.get("apt")
    if not isinstance(apt, dict):
        apt = {}
        addons["apt"] = apt
    sources: List[Any] = _as_list(apt.get("sources"))
    packages: List[Any] = _as_list(apt.get("packages"))
    if CHROME_SOURCE not in sources:
        sources.append(CHROME_SOURCE)
    if CHROME_PACKAGE not in packages:
        packages.append(CHROME_PACKAGE)
    apt["sources"] = [source for source in sources if source != C11_SOURCE]
    apt["packages"] = [package for package in packages if package != C11_PACKAGE]

    env = travis.get("env")
    if isinstance(env, list):
        env = {"global": env}
    elif not isinstance(env, dict):
        env = {"global": []}
    env["global"] = [entry for entry in _as_list(env.get("global")) if entry != C11_ENV]
    travis["env"] = env
    return travis


def dump_travis(travis: Dict[str, Any]) -> str:
    return yaml.safe_dump(travis, default_flow_style=False, sort_keys=False)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]
