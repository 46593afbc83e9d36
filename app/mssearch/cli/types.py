"""Shared types and utilities for CLI commands.

Resolves where a run connects to from command-line options, the
settings file and environment detection, in that order of precedence.
"""

from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from mssearch.core.settings import Settings
from mssearch.db.environment import (
    ConnectionConfig,
    detect_environment,
    detect_table_prefix,
    management_command,
)


@dataclass(frozen=True, slots=True)
class RunTarget:
    """Resolved connection target for a run.

    Attributes:
        environment: Detected environment settings.
        url: Database URL actually used.
        prefix: Shared table prefix.
        cli_command: Management tool command for hints.
        url_overridden: Whether the URL came from an option or settings.
    """

    environment: ConnectionConfig
    url: URL
    prefix: str
    cli_command: str
    url_overridden: bool = False

    @property
    def display_url(self) -> str:
        """Return the URL with the password masked."""
        return self.url.render_as_string(hide_password=True)


def resolve_target(
    settings: Settings,
    database_url: str | None = None,
    prefix: str | None = None,
    start: Path | None = None,
) -> RunTarget:
    """Resolve the database URL, table prefix and hint command.

    Args:
        settings: Loaded user settings.
        database_url: URL given on the command line.
        prefix: Table prefix given on the command line.
        start: Directory to search for wp-config.php (default: cwd).

    Returns:
        RunTarget for the run.

    Raises:
        ValueError: If the given database URL cannot be parsed.
    """
    environment = detect_environment(start=start)

    raw_url = database_url or settings.database.url
    if raw_url:
        try:
            url = make_url(raw_url)
        except ArgumentError as e:
            msg = f"Invalid database URL: {raw_url!r}"
            raise ValueError(msg) from e
    else:
        url = environment.url

    return RunTarget(
        environment=environment,
        url=url,
        prefix=prefix or settings.database.table_prefix or detect_table_prefix(start),
        cli_command=settings.display.cli_command or management_command(environment),
        url_overridden=bool(raw_url),
    )
