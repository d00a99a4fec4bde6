"""NowDo CLI - client sync layer for the NowDo productivity backend."""

__version__ = "0.1.0"
