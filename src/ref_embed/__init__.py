"""Embed an artifact's binary dependencies as named resources."""

__version__ = "0.1.0"
