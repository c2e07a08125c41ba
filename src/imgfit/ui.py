"""UI utilities for the imgfit CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


def create_progress() -> Progress:
    """Create a standard progress bar for imgfit operations.

    Returns:
        Configured Progress instance with spinner, description,
        bar, percentage, count, and elapsed time columns.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("({task.completed}/{task.total})"),
        TimeElapsedColumn(),
        console=None,
    )


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through rich (DEBUG when verbose)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
