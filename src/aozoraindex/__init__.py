"""Collect Aozora Bunko works into a local full-text index."""

__version__ = "0.1.0"
