"""Raggy Notes: chat with and search your notes."""

__version__ = "0.1.0"
