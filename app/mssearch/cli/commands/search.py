"""Search command implementation.

Scans every active site of the network for a literal substring and
prints matching locations, links and WP-CLI hints.
"""

from pathlib import Path
from typing import Annotated

import typer

from mssearch.cli.types import RunTarget, resolve_target
from mssearch.core.errors import (
    DatabaseConnectionError,
    InvalidPatternError,
    RegistryError,
    ScanConfigError,
)
from mssearch.core.settings import SettingsError, load_settings
from mssearch.db.connection import open_connection
from mssearch.db.registry import load_tenants
from mssearch.models.options import ScanOptions
from mssearch.scan.coordinator import ScanCoordinator
from mssearch.scan.formatter import RULE_WIDTH, ResultFormatter
from mssearch.scan.patterns import build_exclusion_rules
from mssearch.scan.scanner import TenantScanner
from mssearch.utils.formatting import console, print_error, print_rule

CONNECTION_HINT = "Check your database connection and environment."


def _print_banner(target: RunTarget) -> None:
    """Print the detected environment before connecting."""
    console.print(f"Environment detected: {target.environment.kind}", highlight=False)
    if target.url_overridden:
        console.print(f"Database: {target.display_url}", highlight=False)
    elif target.environment.kind != "default":
        console.print(f"Database: {target.environment.target}", highlight=False)
    console.print(f"Table prefix: {target.prefix}", highlight=False)
    print_rule()


def _print_search_header(options: ScanOptions, site_count: int) -> None:
    """Print the search term, active options and site count."""
    console.print(f'Searching for: "{options.search_term}"', highlight=False, markup=False)
    console.print("Options: " + ", ".join(options.describe()), highlight=False, markup=False)
    print_rule("=", RULE_WIDTH + 1)
    console.print(f"Scanning {site_count} active sites...\n", highlight=False)


def search_sites(
    ctx: typer.Context,
    term: Annotated[
        str,
        typer.Argument(help="Text to search for (matched as a literal substring)."),
    ],
    posts_only: Annotated[
        bool,
        typer.Option("--posts-only", "--content-only", help="Search only post content."),
    ] = False,
    meta_only: Annotated[
        bool,
        typer.Option("--meta-only", "--metadata-only", help="Search only post meta."),
    ] = False,
    options_only: Annotated[
        bool,
        typer.Option("--options-only", "--configuration-only", help="Search only options."),
    ] = False,
    summary: Annotated[
        bool,
        typer.Option("--summary", "-s", help="Show only match counts per site."),
    ] = False,
    case_sensitive: Annotated[
        bool,
        typer.Option("--case-sensitive", "-c", help="Case-sensitive search."),
    ] = False,
    published_only: Annotated[
        bool,
        typer.Option("--published-only", "-p", help="Search only published content."),
    ] = False,
    exclude_revisions: Annotated[
        bool,
        typer.Option("--exclude-revisions", help="Skip post revisions."),
    ] = False,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            "-x",
            help="Exclude meta/option keys matching PATTERN (* and ? wildcards). Repeatable.",
            metavar="PATTERN",
        ),
    ] = None,
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", help="Table prefix (default: from wp-config.php or wp_)."),
    ] = None,
    database_url: Annotated[
        str | None,
        typer.Option(
            "--database-url",
            envvar="MSSEARCH_DATABASE_URL",
            help="SQLAlchemy database URL (default: detected from environment).",
        ),
    ] = None,
    settings_path: Annotated[
        Path | None,
        typer.Option("--config", help="Settings file (default: ~/.config/mssearch/config.toml)."),
    ] = None,
) -> None:
    """Search all sites for a text, shortcode or domain.

    Examples:
        mssearch search "[alpine-phototile-for-flickr"
        mssearch search "contact-form-7" --posts-only
        mssearch search "old-domain.com" --summary
        mssearch search "text" --exclude "jpsq_sync*" --exclude "*cache*"
        mssearch search "Facebook" --case-sensitive
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))

    try:
        settings = load_settings(settings_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    try:
        options = ScanOptions.from_flags(
            term,
            content_only=posts_only,
            metadata_only=meta_only,
            configuration_only=options_only,
            case_sensitive=case_sensitive,
            published_only=published_only,
            exclude_revisions=exclude_revisions,
            summary_only=summary,
            exclude=[*settings.search.exclude, *(exclude or [])],
        )
        rules = build_exclusion_rules(options.exclude_patterns)
    except (ScanConfigError, InvalidPatternError) as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    try:
        target = resolve_target(settings, database_url=database_url, prefix=prefix)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    if not quiet:
        _print_banner(target)

    try:
        with open_connection(target.url) as connection:
            tenants = load_tenants(connection, target.prefix)
            if not quiet:
                _print_search_header(options, len(tenants))

            scanner = TenantScanner(
                connection, options, cli_command=target.cli_command, rules=rules
            )
            coordinator = ScanCoordinator(
                connection,
                target.prefix,
                scanner,
                ResultFormatter(summary_only=options.summary_only),
                console,
                quiet=quiet,
            )
            coordinator.run(tenants)
    except (DatabaseConnectionError, RegistryError) as e:
        print_error(str(e))
        console.print(f"\n{CONNECTION_HINT}")
        raise typer.Exit(code=1) from e
