"""shellcache: offline resource cache synchronizer."""

from shellcache.version import __version__

__all__ = ["__version__"]
