"""Jinja2 environment for the files the bot generates."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).with_name("templates")


@lru_cache(maxsize=None)
def _environment(templates_dir: str) -> Environment:
    loader = FileSystemLoader(templates_dir)
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render_template(template_name: str, /, *, templates_dir: Path | None = None, **context: Any) -> str:
    """Render ``template_name`` from the bundled templates (or ``templates_dir``)."""
    env = _environment(str(templates_dir or TEMPLATES_DIR))
    return env.get_template(template_name).render(**context)


__all__ = ["TEMPLATES_DIR", "render_template"]
