"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from sparkpulse.cli.common.output import console


def configure_logging(verbose: bool = False) -> None:
    """Route log records through Rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
