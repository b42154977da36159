"""Ensures every web source file carries an ``@license`` header."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, List, Pattern

from ..models import RepositorySnapshot
from .base import CleanupPass
from .util import logger, make_commit

HEADER_YEAR = "2016"
LICENSE_HEADER = f"""@license
Copyright (c) {HEADER_YEAR} The Polymer Project Authors. All rights reserved.
This code may only be used under the BSD style license found at http://polymer.github.io/LICENSE.txt
The complete set of authors may be found at http://polymer.github.io/AUTHORS.txt
The complete set of contributors may be found at http://polymer.github.io/CONTRIBUTORS.txt
Code distributed by Google as part of the polymer project is also
subject to an additional IP rights grant found at http://polymer.github.io/PATENTS.txt"""

_SUFFIXES = {".css", ".html", ".js"}
_SKIPPED_DIRS = {"node_modules", "bower_components"}
_ROUGH_HEADER = re.sub(r"\s", "", "\n".join(LICENSE_HEADER.splitlines()[1:])).lower()
_YEAR = re.compile(r"\d{4}")

_HTML_START = re.compile(r"<!--")
_HTML_END = re.compile(r"-->")
_JS_START = re.compile(r"/[*]{1,2}")
_JS_END = re.compile(r"\*/")
_SHEBANG = re.compile(r"^#!")
_DOCTYPE = re.compile(r"^<!\s*doctype", re.IGNORECASE)


class LicenseHeaderPass(CleanupPass):
    """Adds the licence comment, or just the ``@license`` tag when the text is already there."""

    name = "license"
    runs_by_default = True
    description = "Add @license headers to .css, .html and .js files"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        modified: List[str] = []
        for path in iter_source_files(snapshot.directory):
            relative = path.relative_to(snapshot.directory).as_posix()
            if not path.is_file():
                logger.debug("%s: skipping unreadable %s", snapshot.identifier, relative)
                continue
            content = path.read_text(encoding="utf-8")
            updated = ensure_license(content, is_html=path.suffix == ".html")
            if updated == content:
                continue
            path.write_text(updated, encoding="utf-8")
            modified.append(relative)

        if modified:
            await make_commit(snapshot, modified, "[skip ci] Add license headers")


def iter_source_files(root: Path) -> List[Path]:
    files: List[Path] = []
    for path in sorted(root.rglob("*")):
        if path.suffix not in _SUFFIXES:
            continue
        parts = path.relative_to(root).parts
        if any(part.startswith(".") or part in _SKIPPED_DIRS for part in parts[:-1]):
            continue
        files.append(path)
    return files


def ensure_license(content: str, *, is_html: bool) -> str:
    """Return ``content`` with a licence header, unchanged when one is present."""
    lines = content.split("\n")
    start_token: Pattern[str] = _HTML_START if is_html else _JS_START
    end_token: Pattern[str] = _HTML_END if is_html else _JS_END
    add_license: Callable[[List[str]], None] = _add_license_html if is_html else _add_license

    start = _first_matching_line(lines, start_token)
    end = _first_matching_line(lines, end_token)
    if start == -1 or end == -1:
        add_license(lines)
    elif _has_license(lines, start, end):
        return content
    elif _license_roughly_equal(lines, start, end):
        lines.insert(start + 1, "@license")
    else:
        add_license(lines)
    return "\n".join(lines)


def _first_matching_line(lines: List[str], pattern: Pattern[str]) -> int:
    for index, line in enumerate(lines):
        if pattern.search(line):
            return index
    return -1


def _has_license(lines: List[str], start: int, end: int) -> bool:
    return any("@license" in line for line in lines[start : end + 1])


def _license_roughly_equal(lines: List[str], start: int, end: int) -> bool:
    if start + 1 >= len(lines) or end <= start:
        return False
    first_line = _YEAR.sub(HEADER_YEAR, lines[start + 1], count=1)
    text = "\n".join([first_line, *lines[start + 2 : end]])
    return re.sub(r"\s", "", text).lower() == _ROUGH_HEADER


def _add_license(lines: List[str]) -> None:
    index = _first_matching_line(lines, _SHEBANG)
    lines[index + 1 : index + 1] = ["/**", LICENSE_HEADER, "*/"]


def _add_license_html(lines: List[str]) -> None:
    index = _first_matching_line(lines, _DOCTYPE)
    lines[index + 1 : index + 1] = ["<!--", LICENSE_HEADER, "-->"]
