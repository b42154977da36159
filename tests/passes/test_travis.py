"""Tests for the Travis configuration pass."""

from __future__ import annotations

import pytest
import yaml

from repobot.passes.travis import BEFORE_SCRIPT, TravisPass, normalise_travis
from tests._fixtures.repo_builder import RepoBuilder

LEGACY_TRAVIS = """
language: node_js
sudo: false
before_script:
  - npm install -g bower web-component-tester
  - bower install
addons:
  firefox: '46.0'
  apt:
    sources:
      - ubuntu-toolchain-r-test
    packages:
      - g++-4.8
env:
  - CXX=g++-4.8
  - secure: abc
script:
  - xvfb-run wct
"""


@pytest.mark.asyncio
async def test_normalises_legacy_config(repo_builder: RepoBuilder) -> None:
    snapshot = repo_builder.snapshot("paper-input", {".travis.yml": LEGACY_TRAVIS})

    await TravisPass().apply(snapshot)

    travis = yaml.safe_load((snapshot.directory / ".travis.yml").read_text(encoding="utf-8"))
    assert travis["before_script"] == BEFORE_SCRIPT
    assert travis["dist"] == "trusty"
    assert travis["sudo"] == "required"
    assert travis["node_js"] == "stable"
    assert travis["addons"]["firefox"] == "46.0"
    assert travis["addons"]["sauce_connect"] is True
    assert travis["addons"]["apt"] == {
        "sources": ["google-chrome"],
        "packages": ["google-chrome-stable"],
    }
    assert travis["env"] == {"global": [{"secure": "abc"}]}
    assert travis["script"] == ["xvfb-run wct"]
    assert snapshot.needs_review is True
    assert snapshot.repository.messages == ["Update travis config"]


@pytest.mark.asyncio
async def test_normalised_config_is_stable(repo_builder: RepoBuilder) -> None:
    snapshot = repo_builder.snapshot("paper-input", {".travis.yml": LEGACY_TRAVIS})
    cleanup = TravisPass()

    await cleanup.apply(snapshot)
    await cleanup.apply(snapshot)

    assert len(snapshot.repository.commits) == 1


@pytest.mark.asyncio
async def test_missing_travis_file_is_skipped(repo_builder: RepoBuilder) -> None:
    snapshot = repo_builder.snapshot("paper-input")

    await TravisPass().apply(snapshot)

    assert snapshot.dirty is False
    assert snapshot.needs_review is False


@pytest.mark.parametrize(
    "before_script",
    [
        [],
        BEFORE_SCRIPT[:1],
        BEFORE_SCRIPT[:2],
        list(BEFORE_SCRIPT),
    ],
)
def test_leading_standard_steps_are_kept(before_script: list) -> None:
    travis = normalise_travis({"before_script": list(before_script)})

    assert travis["before_script"] == before_script


@pytest.mark.parametrize(
    "before_script",
    [
        ["bower install"],
        [*BEFORE_SCRIPT, "npm run lint"],
    ],
)
def test_other_before_script_is_replaced(before_script: list) -> None:
    travis = normalise_travis({"before_script": before_script})

    assert travis["before_script"] == BEFORE_SCRIPT


def test_missing_before_script_is_not_added() -> None:
    assert "before_script" not in normalise_travis({"language": "node_js"})
