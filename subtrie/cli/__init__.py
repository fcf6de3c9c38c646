"""Command line interface for subtrie."""

from .main import cli, main

__all__ = ["cli", "main"]
