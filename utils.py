"""
General utility functions for the CLI application.

All terminal output except the materialized kubeconfig path goes to stderr, so
that a shell wrapper can capture stdout with `$(kswitch switch)`.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

console: Console = Console(stderr=True)

pr = console.print


def setup_logging(verbose: bool = False) -> None:
    """
    Route the standard library loggers of the application to the stderr console.

    Args:
        verbose: Log at DEBUG level instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose)],
        force=True,
    )
    # httpx logs every request at INFO, keep it quiet unless debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
