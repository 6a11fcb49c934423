"""imgpress — adaptive batch image compression."""

from imgpress.version import __version__

__all__ = ["__version__"]
