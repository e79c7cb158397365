"""Source tree helper utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Generator, Iterable

DEFAULT_EXTENSIONS = (".swift",)
SKIPPED_DIRS = frozenset({".git", ".build", "build", "DerivedData", "Pods", "Carthage"})


def iter_code_files(
    root_paths: Iterable[str | Path], extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
) -> Generator[Path, None, None]:
    """Yield code files beneath the provided directories in sorted order."""

    wanted = {ext.lower() for ext in extensions}
    for root in root_paths:
        root_path = Path(root)
        for path in sorted(root_path.rglob("*")):
            if any(part in SKIPPED_DIRS for part in path.relative_to(root_path).parts[:-1]):
                continue
            if path.suffix.lower() in wanted and path.is_file():
                yield path
