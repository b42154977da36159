"""Cleanup pass implementations and registry construction."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List

from ..config import ConfigError
from .base import CleanupPass, DuplicatePassError, PassRegistry, UnknownPassError
from .bower import BowerPass
from .contributing import ContributingPass
from .issue_template import IssueTemplatePass
from .license_header import LicenseHeaderPass
from .package_json import PackageJsonPass
from .readme import ReadmePass
from .travis import TravisPass
from .wct_conf import WctConfPass

_ENTRY_POINT_GROUP = "repobot.passes"

# Registration order is the default execution order.
BUILTIN_PASSES: tuple[Callable[[], CleanupPass], ...] = (
    BowerPass,
    PackageJsonPass,
    ReadmePass,
    ContributingPass,
    IssueTemplatePass,
    LicenseHeaderPass,
    TravisPass,
    WctConfPass,
)


def build_registry(*, include_entry_points: bool = True) -> PassRegistry:
    """Return a fresh registry holding the built-in passes and any plugins."""
    registry = PassRegistry()
    for factory in BUILTIN_PASSES:
        registry.register(factory())

    if include_entry_points:
        for entry in _iter_entry_points():
            try:
                loaded = entry.load()
            except Exception as exc:
                raise ConfigError(f"Failed to load cleanup pass entry point '{entry.name}': {exc}") from exc
            registry.register(_coerce_pass(entry.name, loaded))

    return registry


def _coerce_pass(name: str, obj: object) -> CleanupPass:
    if isinstance(obj, CleanupPass):
        return obj
    if isinstance(obj, type) and issubclass(obj, CleanupPass):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, CleanupPass):
            return instance
    raise ConfigError(f"Cleanup pass entry point '{name}' must be a CleanupPass subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__: List[str] = [
    "BUILTIN_PASSES",
    "CleanupPass",
    "DuplicatePassError",
    "PassRegistry",
    "UnknownPassError",
    "build_registry",
]
