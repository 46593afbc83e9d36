"""Environment command implementation.

Shows where a search would connect to without connecting.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from mssearch.cli.types import resolve_target
from mssearch.core.paths import get_settings_path
from mssearch.core.settings import SettingsError, load_settings
from mssearch.utils.formatting import console, print_error


def show_environment(
    database_url: Annotated[
        str | None,
        typer.Option(
            "--database-url",
            envvar="MSSEARCH_DATABASE_URL",
            help="SQLAlchemy database URL (default: detected from environment).",
        ),
    ] = None,
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", help="Table prefix (default: from wp-config.php or wp_)."),
    ] = None,
    settings_path: Annotated[
        Path | None,
        typer.Option("--config", help="Settings file (default: ~/.config/mssearch/config.toml)."),
    ] = None,
) -> None:
    """Show the detected environment, database and table prefix."""
    try:
        settings = load_settings(settings_path)
        target = resolve_target(settings, database_url=database_url, prefix=prefix)
    except (SettingsError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    table = Table(
        title="Search Environment",
        show_header=False,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="muted")
    table.add_column("Value", style="text")

    table.add_row("Environment", target.environment.kind)
    table.add_row("Database", target.display_url)
    table.add_row("Table prefix", target.prefix)
    table.add_row("WP-CLI", target.cli_command)
    table.add_row("Settings file", str(settings_path or get_settings_path()))

    console.print(table)
