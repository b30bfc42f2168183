"""Yape transaction report importer."""

__version__ = "0.1.0"
