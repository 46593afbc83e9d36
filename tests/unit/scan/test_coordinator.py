"""Unit tests for ScanCoordinator."""

import io
from unittest.mock import MagicMock, patch

import pytest
from mssearch.core.errors import (
    DatabaseConnectionError,
    QueryExecutionError,
    TableProbeError,
)
from mssearch.core.theme import get_theme
from mssearch.models.options import ScanOptions
from mssearch.models.tenant import Tenant
from mssearch.scan.coordinator import ScanCoordinator
from mssearch.scan.formatter import ResultFormatter
from mssearch.scan.scanner import TenantScanner
from rich.console import Console
from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import OperationalError

from tests.multisite import MultisiteBuilder

SITE_A = Tenant(id=1, domain="a.test")
SITE_B = Tenant(id=2, domain="b.test")
SITE_C = Tenant(id=3, domain="c.test")


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, theme=get_theme(), color_system=None), buffer


def _coordinator(
    connection: Connection,
    options: ScanOptions,
    console: Console,
    *,
    quiet: bool = False,
    elapsed: float = 1.5,
) -> ScanCoordinator:
    ticks = iter([100.0, 100.0 + elapsed])
    return ScanCoordinator(
        connection,
        "wp_",
        TenantScanner(connection, options),
        ResultFormatter(summary_only=options.summary_only),
        console,
        quiet=quiet,
        clock=lambda: next(ticks),
    )


@pytest.fixture
def gallery_network(multisite: MultisiteBuilder) -> MultisiteBuilder:
    """Two sites, one of which embeds a gallery shortcode."""
    multisite.add_site(1, "a.test")
    multisite.add_site(2, "b.test")
    multisite.add_post(1, 5, "Photos", "intro [gallery ids=1,2] outro")
    multisite.add_post(2, 7, "Plain", "no shortcodes here")
    return multisite


class TestRun:
    """Tests for ScanCoordinator.run."""

    def test_shortcode_search_totals(
        self, gallery_network: MultisiteBuilder, connection: Connection
    ) -> None:
        """One of two sites matching gives a 50% match rate."""
        console, buffer = _console()
        options = ScanOptions.from_flags("[gallery", content_only=True)

        totals = _coordinator(connection, options, console).run([SITE_A, SITE_B])

        assert totals.total_matches == 1
        assert totals.tenants_with_matches == 1
        assert totals.tenants_scanned == 2
        assert totals.tenants_failed == 0
        assert totals.match_rate == 50.0
        output = buffer.getvalue()
        assert "FOUND in: a.test/ (Blog ID: 1) - 1 match" in output
        assert "b.test/" not in output
        assert "Match rate: 50.0% of sites contain this text" in output
        assert "Search completed in 1.50 seconds." in output

    def test_excluded_key_not_reported(
        self, multisite: MultisiteBuilder, connection: Connection
    ) -> None:
        """A term present only in a noise key yields zero matches."""
        multisite.add_site(1, "a.test")
        multisite.add_option(1, "jetpack_options", "a.test secret-token")
        console, buffer = _console()
        options = ScanOptions.from_flags("secret-token")

        totals = _coordinator(connection, options, console).run([SITE_A])

        assert totals.total_matches == 0
        assert totals.match_rate is None
        output = buffer.getvalue()
        assert 'No matches found for "secret-token".' in output
        assert "Match rate" not in output

    def test_failed_tenant_does_not_stop_run(
        self, multisite: MultisiteBuilder, engine: Engine, connection: Connection
    ) -> None:
        """A query error on one site is reported and later sites are still scanned."""
        multisite.add_site(1, "a.test")
        multisite.add_site(2, "b.test", content=False, configuration=False)
        multisite.add_site(3, "c.test")
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE wp_2_posts (ID INTEGER PRIMARY KEY, post_title TEXT)"))
        multisite.add_post(1, 1, "First", "needle")
        multisite.add_post(3, 1, "Third", "needle")
        console, buffer = _console()

        totals = _coordinator(connection, ScanOptions.from_flags("needle"), console).run(
            [SITE_A, SITE_B, SITE_C]
        )

        assert totals.tenants_scanned == 3
        assert totals.tenants_failed == 1
        assert totals.tenants_with_matches == 2
        assert totals.total_matches == 2
        output = buffer.getvalue()
        assert "Skipped b.test/ (Blog ID: 2)" in output
        assert "Sites with errors: 1" in output
        assert "FOUND in: c.test/ (Blog ID: 3)" in output

    def test_unreadable_site_url_is_not_a_failure(
        self, multisite: MultisiteBuilder, engine: Engine, connection: Connection
    ) -> None:
        """A site whose URL setting cannot be read still reports its matches."""
        multisite.add_site(1, "a.test", configuration=False)
        with engine.begin() as conn:
            conn.execute(
                text("CREATE TABLE wp_options (option_id INTEGER PRIMARY KEY, option_name TEXT)")
            )
        multisite.add_post(1, 5, "Photos", "intro [gallery ids=1,2] outro")
        console, buffer = _console()
        options = ScanOptions.from_flags("[gallery", content_only=True)

        totals = _coordinator(connection, options, console).run([SITE_A])

        assert totals.total_matches == 1
        assert totals.tenants_failed == 0
        assert "http://a.test/" in buffer.getvalue()

    def test_summary_mode_one_line_per_site(
        self, gallery_network: MultisiteBuilder, connection: Connection
    ) -> None:
        """Summary mode omits per-match detail."""
        console, buffer = _console()
        options = ScanOptions.from_flags("[gallery", summary_only=True)

        _coordinator(connection, options, console).run([SITE_A, SITE_B])

        output = buffer.getvalue()
        assert "✓ a.test/ (Blog ID: 1) - 1 match" in output
        assert "└─" not in output
        assert "FOUND in" not in output

    def test_full_mode_lists_matches(
        self, gallery_network: MultisiteBuilder, connection: Connection
    ) -> None:
        """Full mode prints each match with its link."""
        console, buffer = _console()

        _coordinator(connection, ScanOptions.from_flags("[gallery"), console).run([SITE_A])

        output = buffer.getvalue()
        assert 'Post: "Photos" (ID: 5, Type: post, Status: publish)' in output
        assert "http://a.test/wp-admin/post.php?post=5&action=edit" in output

    def test_empty_tenant_list(self, connection: Connection) -> None:
        """With no tenants the summary still prints."""
        console, buffer = _console()

        totals = _coordinator(connection, ScanOptions.from_flags("x"), console).run([])

        assert totals.tenants_scanned == 0
        assert "SEARCH SUMMARY:" in buffer.getvalue()

    def test_repeated_runs_identical(
        self, gallery_network: MultisiteBuilder, connection: Connection
    ) -> None:
        """Two runs over unchanged data with a fixed clock produce the same output."""
        options = ScanOptions.from_flags("[gallery")
        first_console, first = _console()
        second_console, second = _console()

        first_totals = _coordinator(connection, options, first_console).run([SITE_A, SITE_B])
        second_totals = _coordinator(connection, options, second_console).run([SITE_A, SITE_B])

        assert first_totals == second_totals
        assert first.getvalue() == second.getvalue()


class TestProgress:
    """Tests for the periodic progress marker."""

    def test_marker_after_interval(self, connection: Connection) -> None:
        """A marker is printed every PROGRESS_INTERVAL sites."""
        console, buffer = _console()
        tenants = [Tenant(id=i, domain=f"s{i}.test") for i in range(10, 15)]

        with patch("mssearch.scan.coordinator.PROGRESS_INTERVAL", 2):
            _coordinator(connection, ScanOptions.from_flags("x"), console).run(tenants)

        output = buffer.getvalue()
        assert "Processed 2 sites..." in output
        assert "Processed 4 sites..." in output
        assert "Processed 5 sites..." not in output

    def test_no_marker_in_summary_mode(self, connection: Connection) -> None:
        """Summary mode suppresses progress markers."""
        console, buffer = _console()
        tenants = [Tenant(id=i, domain=f"s{i}.test") for i in range(10, 14)]
        options = ScanOptions.from_flags("x", summary_only=True)

        with patch("mssearch.scan.coordinator.PROGRESS_INTERVAL", 2):
            _coordinator(connection, options, console).run(tenants)

        assert "Processed" not in buffer.getvalue()

    def test_no_marker_when_quiet(self, connection: Connection) -> None:
        """Quiet mode suppresses progress markers."""
        console, buffer = _console()
        tenants = [Tenant(id=i, domain=f"s{i}.test") for i in range(10, 14)]

        with patch("mssearch.scan.coordinator.PROGRESS_INTERVAL", 2):
            _coordinator(connection, ScanOptions.from_flags("x"), console, quiet=True).run(
                tenants
            )

        assert "Processed" not in buffer.getvalue()


class TestFatalErrors:
    """Tests for errors that end the run."""

    def test_probe_failure_propagates(self, connection: Connection) -> None:
        """A failed table probe aborts the run."""
        console, _ = _console()
        coordinator = _coordinator(connection, ScanOptions.from_flags("x"), console)
        error = OperationalError("PRAGMA", {}, Exception("server has gone away"))

        with (
            patch("mssearch.scan.tables.inspect", side_effect=error),
            pytest.raises(TableProbeError),
        ):
            coordinator.run([SITE_A, SITE_B])

    def test_rollback_failure_is_fatal(self) -> None:
        """A connection that cannot roll back after a failed query is fatal."""
        connection = MagicMock()
        connection.rollback.side_effect = OperationalError("ROLLBACK", {}, Exception("gone"))
        scanner = MagicMock()
        scanner.scan.side_effect = QueryExecutionError(1, "content", "boom")
        console, _ = _console()
        coordinator = ScanCoordinator(connection, "wp_", scanner, ResultFormatter(), console)

        with (
            patch("mssearch.scan.coordinator.resolve_tables"),
            pytest.raises(DatabaseConnectionError, match="unusable"),
        ):
            coordinator.scan_tenant(SITE_A)
