"""Unified diff parsing for attributing findings to changed lines.

Only new-file line numbers are tracked. An added line records the current
new-file cursor and advances it; a context line advances it; a removed line
records the cursor without advancing. Removed lines therefore carry the
new-file position at which the deletion happened, not the old-file line
number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .result import Finding
from .utils import normalize_path

DEV_NULL = "/dev/null"
HUNK_NEW_START = re.compile(r"\+(\d+)")


@dataclass
class DiffFile:
    """Changed line numbers for one file of a unified diff."""

    path: str
    added_lines: Set[int] = field(default_factory=set)
    removed_lines: Set[int] = field(default_factory=set)


def _header_path(line: str, marker: str) -> str:
    # "+++ b/Sources/Foo.swift\t2024-01-01 00:00:00" -> "Sources/Foo.swift"
    path = line[len(marker):].split("\t", 1)[0].strip()
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


def _hunk_start(line: str) -> int:
    _, _, tail = line.partition("@@")
    match = HUNK_NEW_START.search(tail)
    return int(match.group(1)) if match else 0


def parse_unified_diff(text: str) -> List[DiffFile]:
    """Parse ``git diff`` style output into per-file changed line sets.

    Files are returned in order of first appearance. A deleted file
    (``+++ /dev/null``) is reported under its old path.
    """

    files: Dict[str, DiffFile] = {}
    current: Optional[DiffFile] = None
    old_path: Optional[str] = None
    cursor = 0

    lines = text.splitlines()
    for index, line in enumerate(lines):
        if line.startswith("--- ") and index + 1 < len(lines) and lines[index + 1].startswith("+++ "):
            old_path = _header_path(line, "--- ")
            continue

        if line.startswith("+++ ") and (old_path is not None or current is None):
            path = _header_path(line, "+++ ")
            if path == DEV_NULL:
                path = old_path if old_path and old_path != DEV_NULL else DEV_NULL
            path = normalize_path(path)
            current = files.setdefault(path, DiffFile(path=path))
            old_path = None
            cursor = 0
            continue

        if line.startswith("@@"):
            cursor = _hunk_start(line)
            continue

        if current is None:
            continue

        marker = line[:1]
        if marker == "+":
            current.added_lines.add(cursor)
            cursor += 1
        elif marker == " ":
            cursor += 1
        elif marker == "-":
            current.removed_lines.add(cursor)

    return list(files.values())


def load_diff(path: Path) -> List[DiffFile]:
    """Read and parse a diff file; ``OSError`` propagates."""

    return parse_unified_diff(path.read_text(encoding="utf-8", errors="replace"))


def _is_component_suffix(shorter: Tuple[str, ...], longer: Tuple[str, ...]) -> bool:
    return 0 < len(shorter) <= len(longer) and longer[len(longer) - len(shorter) :] == shorter


def find_diff_file(file_path: str, diff_files: Optional[Sequence[DiffFile]]) -> Optional[DiffFile]:
    """Return the diff entry for ``file_path``.

    An exact match on the normalized path wins. Otherwise the first entry
    whose path ends with ``file_path`` on a component boundary (or the other
    way round) is used, so findings relative to a subdirectory still match a
    diff taken at the repository root.
    """

    if not diff_files:
        return None
    wanted = normalize_path(file_path)
    for entry in diff_files:
        if normalize_path(entry.path) == wanted:
            return entry
    wanted_parts = tuple(wanted.split("/"))
    for entry in diff_files:
        parts = tuple(normalize_path(entry.path).split("/"))
        if _is_component_suffix(wanted_parts, parts) or _is_component_suffix(parts, wanted_parts):
            return entry
    return None


def changed_lines(file_path: str, diff_files: Optional[Sequence[DiffFile]] = None) -> Set[int]:
    """Return the added line numbers for ``file_path``.

    An absent diff or an untouched file yields an empty set. Removed lines are
    not part of the changed surface.
    """

    entry = find_diff_file(file_path, diff_files)
    if entry is None:
        return set()
    return set(entry.added_lines)


def is_line_changed(file_path: str, line: int, diff_files: Optional[Sequence[DiffFile]] = None) -> bool:
    return line in changed_lines(file_path, diff_files)


def filter_findings(
    findings: Iterable[Finding],
    diff_files: Sequence[DiffFile],
    keep_paths: Iterable[str] = (),
) -> List[Finding]:
    """Keep findings on added lines; findings for ``keep_paths`` are always kept.

    ``keep_paths`` carries locations of project-level findings, which have no
    meaningful line to scope by.
    """

    kept = {normalize_path(path) for path in keep_paths}
    cache: Dict[str, Set[int]] = {}
    scoped: List[Finding] = []
    for finding in findings:
        path = normalize_path(finding.file)
        if path in kept:
            scoped.append(finding)
            continue
        if path not in cache:
            cache[path] = changed_lines(path, diff_files)
        if finding.line in cache[path]:
            scoped.append(finding)
    return scoped
