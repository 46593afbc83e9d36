"""Logging setup for the CLI.

Library modules only create module loggers; handlers are attached
here, by the root command, replacing any from an earlier run.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(console: Console, verbose: bool = False) -> None:
    """Route log records through Rich on the given console.

    Args:
        console: Console to write log records to (normally stderr).
        verbose: Log at DEBUG level instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    # Replace handlers left by an earlier call in the same process
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)
