"""Exception types raised by the review gate."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when an explicitly requested configuration cannot be used."""


class ReviewError(RuntimeError):
    """Raised when the review pipeline cannot run at all."""
