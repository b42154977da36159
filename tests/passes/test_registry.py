"""Tests for the cleanup pass registry and its built-in catalog."""

from __future__ import annotations

import pytest

from repobot.config import ConfigError
from repobot.models import RepositorySnapshot
import repobot.passes as passes_module
from repobot.passes import BUILTIN_PASSES, build_registry
from repobot.passes.base import CleanupPass, DuplicatePassError, PassRegistry, UnknownPassError


class _NoopPass(CleanupPass):
    def __init__(self, name: str, runs_by_default: bool = True) -> None:
        self.name = name
        self.runs_by_default = runs_by_default

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        return None


def test_builtin_registry_order_and_defaults() -> None:
    registry = build_registry(include_entry_points=False)

    assert len(registry) == len(BUILTIN_PASSES)
    assert registry.names() == [
        "bower",
        "package-json",
        "readme",
        "contributing",
        "issue-template",
        "license",
        "travis",
        "wct-conf",
    ]
    assert [cleanup_pass.name for cleanup_pass in registry.defaults()] == [
        "bower",
        "readme",
        "contributing",
        "license",
        "travis",
    ]


def test_duplicate_names_are_rejected() -> None:
    registry = PassRegistry([_NoopPass("bower")])

    with pytest.raises(DuplicatePassError):
        registry.register(_NoopPass("bower"))
    assert len(registry) == 1


def test_nameless_and_non_passes_are_rejected() -> None:
    registry = PassRegistry()

    with pytest.raises(ConfigError):
        registry.register(_NoopPass(""))
    with pytest.raises(TypeError):
        registry.register(object())  # type: ignore[arg-type]


def test_select_keeps_requested_order() -> None:
    registry = PassRegistry([_NoopPass("a"), _NoopPass("b"), _NoopPass("c", runs_by_default=False)])

    assert [p.name for p in registry.select(["c", "a"])] == ["c", "a"]
    assert [p.name for p in registry.select(None)] == ["a", "b"]
    assert registry.select([]) == []


def test_select_rejects_unknown_names() -> None:
    registry = PassRegistry([_NoopPass("a")])

    with pytest.raises(UnknownPassError, match="nope"):
        registry.select(["a", "nope"])
    with pytest.raises(UnknownPassError):
        registry.get("nope")


def test_list_returns_a_copy() -> None:
    registry = PassRegistry([_NoopPass("a")])

    registry.list().clear()

    assert "a" in registry
    assert [p.name for p in registry] == ["a"]


class _EntryPoint:
    def __init__(self, name: str, target: object = None, error: Exception | None = None) -> None:
        self.name = name
        self.target = target
        self.error = error

    def load(self) -> object:
        if self.error is not None:
            raise self.error
        return self.target


class _PluginPass(CleanupPass):
    name = "plugin"
    runs_by_default = False

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        return None


def test_entry_point_passes_are_appended(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(passes_module, "_iter_entry_points", lambda: [_EntryPoint("plugin", _PluginPass)])

    registry = build_registry()

    assert registry.names()[-1] == "plugin"
    assert "plugin" not in [p.name for p in registry.defaults()]


def test_broken_entry_point_is_a_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    broken = _EntryPoint("broken", error=ImportError("No module named 'repobot_extra'"))
    monkeypatch.setattr(passes_module, "_iter_entry_points", lambda: [broken])

    with pytest.raises(ConfigError, match="'broken'.*repobot_extra"):
        build_registry()


def test_entry_point_that_is_not_a_pass_is_a_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(passes_module, "_iter_entry_points", lambda: [_EntryPoint("odd", 42)])

    with pytest.raises(ConfigError, match="'odd'"):
        build_registry()


def test_contributing_pass_requires_the_guide_repository() -> None:
    registry = build_registry(include_entry_points=False)

    assert registry.get("contributing").requires == ("PolymerElements/ContributionGuide",)
    assert all(p.requires == () for p in registry if p.name != "contributing")
