"""Collapse module dependency graphs into component graphs."""

__version__ = "0.1.0"
