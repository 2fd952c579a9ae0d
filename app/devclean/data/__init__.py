"""Bundled data files for devclean."""
