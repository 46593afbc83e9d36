"""CLI package for mssearch.

This package contains the Typer application and all subcommands.
"""

from mssearch.cli.main import app

__all__ = ["app"]
