"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from mssearch import __version__
from mssearch.cli.commands import env, search
from mssearch.core.log import setup_logging
from mssearch.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="mssearch",
    help="Find text across every site of a WordPress multisite.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"mssearch version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress the run banner and progress markers.",
        ),
    ] = False,
) -> None:
    """mssearch - Full-text search across all sites of a WordPress multisite.

    Searches post content, post meta and options of every active site
    for a literal substring and reports where it was found.
    """
    setup_logging(err_console, verbose=verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="search")(search.search_sites)
app.command(name="env")(env.show_environment)


if __name__ == "__main__":
    app()
