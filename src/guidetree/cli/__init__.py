"""
Command-line interface for guidetree.

Built with Typer for type-safe argument parsing and Rich for
status output.
"""

from guidetree.cli.main import app

__all__ = ["app"]
