"""CLI commands for mssearch.

This package contains all subcommand implementations.
"""

from mssearch.cli.commands import env, search

__all__ = ["env", "search"]
