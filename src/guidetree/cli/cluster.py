"""
Cluster command for building guide trees.

Reads a tab-separated pairwise score table, runs greedy average-linkage
clustering and prints the resulting tree as a single Newick line.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from guidetree.cli.utils import (
    QuietConsole,
    configure_logging,
    spinner_progress,
    version_callback,
)
from guidetree.core.exceptions import GuideTreeError

# Status goes to stderr so stdout carries only the tree
console = Console(stderr=True)


def cluster(
    input_tsv: Path = typer.Argument(
        ...,
        help="Pairwise score table: item_a <TAB> item_b <TAB> score, one pair per line",
        exists=True,
        dir_okay=False,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the Newick tree to this file instead of standard output",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    distance: bool = typer.Option(
        False,
        "--distance",
        help="Treat scores as distances (smallest merges first)",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Threads for linkage recomputation within each merge step",
        min=1,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Build an average-linkage guide tree.

    Every unordered pair of items must appear exactly once in the table.
    The two active clusters with the highest mean pairwise score are joined
    until a single tree remains.

    Examples:

        # Similarity table, tree on stdout
        guidetree scores.tsv

        # Distance table, tree written to a file
        guidetree distances.tsv --distance --output tree.nwk
    """
    from guidetree.core.clustering.engine import cluster_table
    from guidetree.core.pairwise import PairwiseTableParser
    from guidetree.models.config import ClusteringConfig

    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet)

    try:
        config = ClusteringConfig.from_yaml(config_path) if config_path else ClusteringConfig()
        config = config.with_overrides(
            score_mode="distance" if distance else None,
            workers=workers,
        )

        out.print(f"[bold]Input:[/bold] {escape(str(input_tsv))}")
        out.print(f"[bold]Score mode:[/bold] {config.score_mode}")

        table = PairwiseTableParser(input_tsv).parse()
        out.print(f"[bold]Items:[/bold] {table.n_items} ({len(table)} pairs)")

        with spinner_progress(
            f"Clustering {table.n_items} items...",
            console,
            quiet,
        ):
            result = cluster_table(table, config)
    except GuideTreeError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        if e.suggestion:
            console.print(f"[dim]{escape(e.suggestion)}[/dim]")
        raise typer.Exit(code=1) from None

    if verbose:
        out.print(
            f"[dim]{result.n_merges} merges, {result.n_stale} stale entries discarded, "
            f"{result.n_undefined_linkages} undefined linkages[/dim]"
        )

    if output is None:
        typer.echo(result.newick)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.newick + "\n")
    out.print(f"[bold green]Tree written to[/bold green] {escape(str(output))}")
