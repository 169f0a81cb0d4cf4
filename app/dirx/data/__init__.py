"""Bundled data files for dirx."""
