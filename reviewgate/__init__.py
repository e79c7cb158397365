"""Code review CI gate: static rules plus performance and size regression gates."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("reviewgate")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"

__all__ = ["__version__"]
