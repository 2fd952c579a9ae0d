"""Core application services for devclean.

Paths, configuration, theming, and the scan/delete operations.
"""
