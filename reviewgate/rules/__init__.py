"""Rule protocols shared by all detectors."""

from __future__ import annotations

from pathlib import Path
from typing import List, Protocol, Sequence, runtime_checkable

from reviewgate.result import Finding


@runtime_checkable
class FileRule(Protocol):
    """Protocol implemented by rules that inspect one file at a time.

    Implementations capture their options at construction and must be pure
    functions of ``(path, source)`` afterwards.
    """

    name: str

    def evaluate(self, path: str, source: str) -> Sequence[Finding]:
        """Return findings for ``source``, reported against ``path``."""


@runtime_checkable
class ProjectRule(Protocol):
    """Protocol implemented by rules that inspect the whole source tree."""

    name: str

    def evaluate_project(self, source_root: Path) -> Sequence[Finding]:
        """Return findings for the tree rooted at ``source_root``."""


def split_lines(source: str) -> List[str]:
    """Split source into lines so that ``index + 1`` is the 1-based line number."""

    return source.splitlines()
