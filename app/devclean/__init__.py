"""devclean - find and clean up stale developer projects and package caches."""

__version__ = "0.3.0"
