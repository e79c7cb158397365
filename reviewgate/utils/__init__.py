"""Utility helpers for the review gate."""

from .code import iter_code_files
from .fileio import read_text_file
from .paths import normalize_path, relativize

__all__ = [
    "iter_code_files",
    "normalize_path",
    "read_text_file",
    "relativize",
]
