"""Grounded question answering over ingested company documents."""

__version__ = "0.1.0"
