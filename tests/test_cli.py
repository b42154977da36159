"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pytest

import repobot.passes as passes_module
from repobot import cli
from repobot.cli import _build_parser, main


def test_cli_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.max_changes is None
    assert args.repos is None
    assert args.passes is None
    assert args.branch is None
    assert args.no_progress is False
    assert args.force_review is False
    assert args.config == "config.yml"
    assert args.token_file == "token"


def test_cli_collects_repeated_repo_and_pass_flags() -> None:
    args = _build_parser().parse_args(
        ["-r", "PolymerElements/paper-input", "--repo", "Polymer/polymer", "-p", "travis", "-p", "readme"]
    )

    assert args.repos == ["PolymerElements/paper-input", "Polymer/polymer"]
    assert args.passes == ["travis", "readme"]


def test_cli_parses_max_changes() -> None:
    args = _build_parser().parse_args(["--max-changes", "5", "--branch", "2.0-preview", "--force-review"])

    assert args.max_changes == 5
    assert args.branch == "2.0-preview"
    assert args.force_review is True


@pytest.mark.parametrize("value", ["-2", "three"])
def test_cli_rejects_invalid_max_changes(value: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args([f"--max-changes={value}"])
    assert excinfo.value.code == 2


def test_list_passes_prints_registry(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--list-passes"])

    output = capsys.readouterr().out
    assert "* bower" in output
    assert "  package-json" in output
    assert "travis" in output


def test_missing_config_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.yml")])

    assert excinfo.value.code == 1
    assert "Config file not found" in capsys.readouterr().err


class _RecordingOrchestrator:
    instances: List["_RecordingOrchestrator"] = []
    error: Exception | None = None

    def __init__(self, config: Any, **kwargs: Any) -> None:
        self.config = config
        self.kwargs = kwargs
        self.options: Any = None
        _RecordingOrchestrator.instances.append(self)

    async def run(self, options: Any) -> None:
        self.options = options
        if self.error is not None:
            raise self.error


@pytest.fixture
def configured(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> List[str]:
    config_file = tmp_path / "config.yml"
    config_file.write_text("org: PolymerElements\nmax_changes: 2\n", encoding="utf-8")
    token_file = tmp_path / "token"
    token_file.write_text("secret\n", encoding="utf-8")
    _RecordingOrchestrator.instances = []
    _RecordingOrchestrator.error = None
    monkeypatch.setattr(cli, "RunOrchestrator", _RecordingOrchestrator)
    return ["--config", str(config_file), "--token-file", str(token_file)]


def test_main_builds_run_options_from_flags(configured: List[str]) -> None:
    main([*configured, "-c", "7", "-r", "PolymerElements/paper-input", "--no-progress", "--assignee", "octocat"])

    (orchestrator,) = _RecordingOrchestrator.instances
    assert orchestrator.config.max_changes == 7
    assert orchestrator.kwargs["token"] == "secret"
    assert orchestrator.options.repos == ["PolymerElements/paper-input"]
    assert orchestrator.options.progress is False
    assert orchestrator.options.assignee == "octocat"
    assert orchestrator.options.pr_branch == "auto-cleanup"


def test_main_keeps_config_max_changes_without_flag(configured: List[str]) -> None:
    main(configured)

    assert _RecordingOrchestrator.instances[0].config.max_changes == 2


def test_main_exits_non_zero_when_run_fails(
    configured: List[str], capsys: pytest.CaptureFixture[str]
) -> None:
    _RecordingOrchestrator.error = RuntimeError("Error updating repos/paper-input:\nboom")

    with pytest.raises(SystemExit) as excinfo:
        main(configured)

    assert excinfo.value.code == 1
    assert "boom" in capsys.readouterr().err


def test_broken_pass_plugin_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    class _BrokenEntryPoint:
        name = "broken"

        def load(self) -> object:
            raise ImportError("No module named 'repobot_extra'")

    monkeypatch.setattr(passes_module, "_iter_entry_points", lambda: [_BrokenEntryPoint()])

    with pytest.raises(SystemExit) as excinfo:
        main(["--list-passes"])

    assert excinfo.value.code == 1
    assert "Failed to load cleanup pass entry point 'broken'" in capsys.readouterr().err
