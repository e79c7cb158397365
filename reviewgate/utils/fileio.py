"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path


def read_text_file(path: Path) -> str:
    """Return the file contents as UTF-8 text; ``OSError`` propagates to the caller."""

    return path.read_text(encoding="utf-8", errors="replace")
