"""Extracts element and behavior documentation from HTML sources."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..logging import get_logger

ELEMENT = "element"
BEHAVIOR = "behavior"

_SKIPPED_FILES = re.compile(r"demo|index\.html|dependencies\.html")
_DOC_COMMENT = re.compile(r"/\*\*((?:(?!\*/).)*)\*/", re.DOTALL)
_HTML_COMMENT = re.compile(r"<!--((?:(?!-->).)*)-->", re.DOTALL)
_ELEMENT_DECL = re.compile(r"Polymer\(\s*\{\s*is\s*:\s*['\"]([A-Za-z0-9-]+)['\"]")
_DOM_MODULE = re.compile(r"<dom-module\s+id\s*=\s*['\"]([A-Za-z0-9-]+)['\"]")
_BEHAVIOR_TAG = re.compile(r"@polymerBehavior(?:[ \t]+([\w.]+))?")
_ASSIGNMENT = re.compile(r"\s*(?:var\s+|let\s+|const\s+)?([\w.]+)\s*=")


@dataclass(frozen=True)
class DocSymbol:
    """Documentation for a single element or behavior."""

    kind: str
    name: str
    description: str
    source: Path


@dataclass
class DocIndex:
    """Cross-repository index of documented symbols, shared read-only by passes."""

    symbols: List[DocSymbol] = field(default_factory=list)

    def in_directory(self, directory: Path, kind: Optional[str] = None) -> List[DocSymbol]:
        """Return symbols whose source file sits directly inside ``directory``."""
        target = Path(directory).resolve()
        return [
            symbol
            for symbol in self.symbols
            if symbol.source.parent.resolve() == target and (kind is None or symbol.kind == kind)
        ]

    def elements_in(self, directory: Path) -> List[DocSymbol]:
        return self.in_directory(directory, ELEMENT)

    def behaviors_in(self, directory: Path) -> List[DocSymbol]:
        return self.in_directory(directory, BEHAVIOR)

    def __len__(self) -> int:
        return len(self.symbols)


class ElementAnalyzer:
    """Scans top-level HTML files of each repository for documented symbols."""

    def __init__(self) -> None:
        self.logger = get_logger("analysis")

    def collect_files(self, directories: Iterable[Path]) -> List[Path]:
        files: List[Path] = []
        for directory in directories:
            directory = Path(directory)
            if not directory.is_dir():
                continue
            for path in sorted(directory.iterdir()):
                if not path.is_file() or path.suffix != ".html":
                    continue
                if _SKIPPED_FILES.search(path.name):
                    continue
                files.append(path)
        return files

    def analyze(self, directories: Iterable[Path]) -> DocIndex:
        index = DocIndex()
        for path in self.collect_files(directories):
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Skipping %s during analysis: %s", path, exc)
                continue
            index.symbols.extend(self.analyze_source(content, path))
        self.logger.debug("Analysis found %d documented symbols", len(index))
        return index

    def analyze_source(self, content: str, source: Path) -> List[DocSymbol]:
        symbols: List[DocSymbol] = []
        doc_comments = [(match.start(), match.end(), match.group(1)) for match in _DOC_COMMENT.finditer(content)]
        module_docs = _dom_module_docs(content)

        seen: set[str] = set()
        for match in _ELEMENT_DECL.finditer(content):
            tag = match.group(1)
            if tag in seen:
                continue
            seen.add(tag)
            raw = _comment_before(content, doc_comments, match.start())
            if raw is None:
                raw = module_docs.get(tag, "")
            symbols.append(DocSymbol(ELEMENT, tag, _clean_description(raw), source))

        for start, end, raw in doc_comments:
            tag_match = _BEHAVIOR_TAG.search(raw)
            if not tag_match:
                continue
            name = tag_match.group(1)
            if not name:
                assignment = _ASSIGNMENT.match(content, end)
                if not assignment:
                    continue
                name = assignment.group(1)
            if name in seen:
                continue
            seen.add(name)
            symbols.append(DocSymbol(BEHAVIOR, name, _clean_description(raw), source))
        return symbols


def _comment_before(
    content: str, comments: Sequence[Tuple[int, int, str]], position: int
) -> Optional[str]:
    for start, end, raw in reversed(comments):
        if end > position:
            continue
        if content[end:position].strip():
            return None
        return raw
    return None


def _dom_module_docs(content: str) -> Dict[str, str]:
    docs: Dict[str, str] = {}
    comments = [(match.start(), match.end(), match.group(1)) for match in _HTML_COMMENT.finditer(content)]
    for match in _DOM_MODULE.finditer(content):
        raw = _comment_before(content, comments, match.start())
        if raw is not None:
            docs[match.group(1)] = raw
    return docs


def _clean_description(raw: str) -> str:
    lines = []
    for line in raw.splitlines():
        stripped = line.strip()
        if stripped.startswith("*"):
            line = line.split("*", 1)[1]
            if line.startswith(" "):
                line = line[1:]
        lines.append(line.rstrip())
    text = textwrap.dedent("\n".join(lines))
    kept: List[str] = []
    for line in text.splitlines():
        if line.lstrip().startswith("@"):
            break
        kept.append(line)
    return "\n".join(kept).strip()


__all__ = ["BEHAVIOR", "ELEMENT", "DocIndex", "DocSymbol", "ElementAnalyzer"]
