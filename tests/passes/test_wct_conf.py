"""Tests for the web-component-tester configuration pass."""

from __future__ import annotations

import json

import pytest

from repobot.passes.wct_conf import WctConfPass
from tests._fixtures.repo_builder import RepoBuilder


@pytest.mark.asyncio
async def test_creates_headless_config(repo_builder: RepoBuilder) -> None:
    snapshot = repo_builder.snapshot("paper-input")

    await WctConfPass().apply(snapshot)

    config = json.loads((snapshot.directory / "wct.conf.json").read_text(encoding="utf-8"))
    assert config == {
        "plugins": {
            "local": {
                "browserOptions": {
                    "chrome": ["no-sandbox", "headless", "disable-gpu"],
                    "firefox": ["-headless"],
                }
            }
        }
    }
    assert snapshot.needs_review is True
    assert snapshot.repository.messages == ["Update WCT config"]


@pytest.mark.asyncio
async def test_keeps_other_plugins_and_is_stable(repo_builder: RepoBuilder) -> None:
    snapshot = repo_builder.snapshot(
        "paper-input",
        {"wct.conf.json": '{"verbose": true, "plugins": {"sauce": {"disabled": true}}}'},
    )
    cleanup = WctConfPass()

    await cleanup.apply(snapshot)
    await cleanup.apply(snapshot)

    config = json.loads((snapshot.directory / "wct.conf.json").read_text(encoding="utf-8"))
    assert config["verbose"] is True
    assert config["plugins"]["sauce"] == {"disabled": True}
    assert len(snapshot.repository.commits) == 1
