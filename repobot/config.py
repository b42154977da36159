"""Configuration loading for repobot (config.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

DEFAULT_EXCLUDED_REPOS = (
    "style-guide",
    "test-all",
    "ContributionGuide",
    "polymer",
)

_TOKEN_ENV = "GITHUB_TOKEN"


class ConfigError(RuntimeError):
    """Raised when the run configuration is missing or cannot be parsed."""


@dataclass
class PassConfig:
    """Per-pass settings from the ``passes`` section."""

    blacklist: List[str] = field(default_factory=list)


@dataclass
class PullRequestConfig:
    """How reviewed changes are proposed upstream."""

    title: str = "Automatic cleanup!"
    body: str = ""
    labels: List[str] = field(default_factory=lambda: ["autogenerated"])
    branch: str = "auto-cleanup"
    delay: float = 5.0


@dataclass
class AuthorConfig:
    """Commit signature used for every commit the bot makes."""

    name: str = "Repo Maintenance Bot"
    email: str = "repobot@users.noreply.github.com"


@dataclass
class RunConfig:
    """Represents the high-level settings defined in config.yml."""

    path: Path
    org: Optional[str] = None
    extra_repositories: List[str] = field(default_factory=list)
    excludes: Optional[List[str]] = None
    workspace: Path = Path("repos")
    fresh_workspace: bool = True
    max_changes: int = 0
    target_branch: Optional[str] = None
    clone_delay: float = 0.1
    pull_request: PullRequestConfig = field(default_factory=PullRequestConfig)
    author: AuthorConfig = field(default_factory=AuthorConfig)
    passes: Dict[str, PassConfig] = field(default_factory=dict)

    def excluded_identifiers(self) -> List[str]:
        """Identifiers never processed; defaults live under the workspace directory."""
        if self.excludes is not None:
            return list(self.excludes)
        return [f"{self.workspace.name}/{name}" for name in DEFAULT_EXCLUDED_REPOS]


def load_config(config_path: Path) -> RunConfig:
    """Load configuration from disk; a missing file is a ConfigError."""
    config_file = config_path.expanduser()
    if not config_file.is_file():
        raise ConfigError(f"Config file not found: {config_file}")

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    root = config_file.parent.resolve()
    config = RunConfig(path=config_file.resolve(), workspace=root / "repos")

    config.org = _as_str(data.get("org"))
    config.extra_repositories = _as_str_list(data.get("extra_repositories"))
    if "excludes" in data:
        config.excludes = _as_str_list(data.get("excludes"))

    workspace = _as_str(data.get("workspace"))
    if workspace:
        config.workspace = (root / workspace).resolve()

    fresh = _as_bool(data.get("fresh_workspace"))
    if fresh is not None:
        config.fresh_workspace = fresh

    if "max_changes" in data:
        max_changes = _as_int(data.get("max_changes"))
        if max_changes is None or max_changes < 0:
            raise ConfigError("max_changes must be a non-negative integer")
        config.max_changes = max_changes

    config.target_branch = _as_str(data.get("target_branch"))

    clone_delay = _as_float(data.get("clone_delay"))
    if clone_delay is not None:
        config.clone_delay = clone_delay

    pr_data = _as_dict(data.get("pull_request"))
    if pr_data:
        pr = config.pull_request
        pr.title = _as_str(pr_data.get("title")) or pr.title
        pr.body = _as_str(pr_data.get("body")) or pr.body
        if "labels" in pr_data:
            pr.labels = _as_str_list(pr_data.get("labels"))
        pr.branch = _as_str(pr_data.get("branch")) or pr.branch
        delay = _as_float(pr_data.get("delay"))
        if delay is not None:
            pr.delay = delay

    author_data = _as_dict(data.get("author"))
    if author_data:
        config.author.name = _as_str(author_data.get("name")) or config.author.name
        config.author.email = _as_str(author_data.get("email")) or config.author.email

    passes_data = data.get("passes")
    if passes_data is not None and not isinstance(passes_data, dict):
        raise ConfigError("passes must be a mapping of pass name to settings")
    for name, settings in (passes_data or {}).items():
        if settings is not None and not isinstance(settings, dict):
            raise ConfigError(f"Settings for pass '{name}' must be a mapping")
        config.passes[str(name)] = PassConfig(
            blacklist=_as_str_list((settings or {}).get("blacklist"))
        )

    return config


def load_token(token_path: Path) -> str:
    """Read the GitHub token from disk, falling back to $GITHUB_TOKEN."""
    path = token_path.expanduser()
    if path.is_file():
        token = path.read_text(encoding="utf-8").strip()
        if token:
            return token
    token = os.environ.get(_TOKEN_ENV, "").strip()
    if token:
        return token
    raise ConfigError(
        f"You need to create a GitHub token and place it in a file named '{token_path}' "
        f"(or export {_TOKEN_ENV}).\n"
        "The token only needs the 'public repos' permission.\n"
        "Generate a token here:   https://github.com/settings/tokens"
    )


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
