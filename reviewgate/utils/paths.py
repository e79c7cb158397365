"""Path normalization helpers shared by the runner and diff attribution."""

from __future__ import annotations

import re
from pathlib import Path

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """Use forward slashes, collapse ``//`` and strip any leading ``./``."""

    normalized = _REPEATED_SLASHES.sub("/", path.replace("\\", "/"))
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def relativize(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` when it lives beneath it, else the absolute path."""

    absolute = path.resolve()
    try:
        return absolute.relative_to(root.resolve()).as_posix()
    except ValueError:
        return absolute.as_posix()
