"""
Main CLI entry point for guidetree.

The app has a single command, so it runs directly on the table path:

    guidetree INPUT_TSV [OPTIONS]
"""

from __future__ import annotations

import typer

app = typer.Typer(
    name="guidetree",
    help="Average-linkage guide trees from pairwise similarity or distance tables",
    add_completion=False,
)


# Import commands
from guidetree.cli import cluster

app.command(name="cluster")(cluster.cluster)


if __name__ == "__main__":
    app()
