"""tapmeta: reproducible build metadata for formula builds."""

from .version import __version__

__all__ = ["__version__"]
