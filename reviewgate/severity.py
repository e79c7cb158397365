"""Severity definitions for review findings."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for findings."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Return an integer ranking; only ``ERROR`` can fail the gate."""

        ordering = {
            Severity.INFO: 0,
            Severity.WARNING: 1,
            Severity.ERROR: 2,
        }
        return ordering[self]

    @property
    def blocks_merge(self) -> bool:
        return self is Severity.ERROR
