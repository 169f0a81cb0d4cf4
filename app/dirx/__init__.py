"""dirx - an enhanced directory listing with archive and content search."""

__version__ = "0.4.0"
