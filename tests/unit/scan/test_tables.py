"""Unit tests for per-tenant table resolution."""

from unittest.mock import MagicMock, patch

import pytest
from mssearch.core.errors import TableProbeError
from mssearch.scan.tables import (
    read_site_url,
    resolve_tables,
    scheme_from_url,
    table_exists,
    table_names,
    tenant_prefix,
)
from sqlalchemy import Connection
from sqlalchemy.exc import OperationalError

from tests.multisite import MultisiteBuilder


class TestTableNames:
    """Tests for table name derivation."""

    def test_primary_site_uses_bare_prefix(self) -> None:
        """Site 1 tables have no id segment."""
        tables = table_names("wp_", 1)
        assert tables.content == "wp_posts"
        assert tables.metadata == "wp_postmeta"
        assert tables.configuration == "wp_options"

    def test_other_sites_insert_id(self) -> None:
        """Other sites use prefix + id + '_'."""
        tables = table_names("wp_", 12)
        assert tables.content == "wp_12_posts"
        assert tables.metadata == "wp_12_postmeta"
        assert tables.configuration == "wp_12_options"

    def test_custom_prefix(self) -> None:
        """Custom prefixes are used as-is."""
        assert tenant_prefix("site_", 3) == "site_3_"
        assert table_names("site_", 1).content == "site_posts"

    def test_names_only_have_no_existence(self) -> None:
        """Derived names carry no existence information."""
        assert table_names("wp_", 2).any_exists is False


class TestTableExists:
    """Tests for existence probing."""

    def test_existing_and_missing_tables(
        self, multisite: MultisiteBuilder, connection: Connection
    ) -> None:
        """Probe reports tables that exist and those that don't."""
        multisite.add_site(1, "a.test", metadata=False)

        assert table_exists(connection, "wp_posts") is True
        assert table_exists(connection, "wp_postmeta") is False

    def test_probe_failure_raises_table_probe_error(self) -> None:
        """A failing probe is a fatal TableProbeError, not 'absent'."""
        error = OperationalError("PRAGMA", {}, Exception("server has gone away"))
        with patch("mssearch.scan.tables.inspect") as mock_inspect:
            mock_inspect.return_value.has_table.side_effect = error
            with pytest.raises(TableProbeError, match="wp_posts"):
                table_exists(MagicMock(), "wp_posts")

    def test_no_caching_between_probes(self, multisite: MultisiteBuilder) -> None:
        """A table created between probes is seen by the next probe."""
        with multisite.engine.connect() as conn:
            assert table_exists(conn, "wp_5_posts") is False
            conn.rollback()
            multisite.add_site(5, "e.test", registered=False)
            assert table_exists(conn, "wp_5_posts") is True


class TestResolveTables:
    """Tests for resolve_tables."""

    def test_partially_provisioned_site(
        self, multisite: MultisiteBuilder, connection: Connection
    ) -> None:
        """Each table is probed independently."""
        multisite.add_site(2, "b.test", content=True, metadata=False, configuration=True)

        tables = resolve_tables(connection, "wp_", 2)

        assert tables.content_exists is True
        assert tables.metadata_exists is False
        assert tables.configuration_exists is True
        assert tables.any_exists is True


class TestSiteUrl:
    """Tests for site URL reading and scheme parsing."""

    def test_read_site_url(self, multisite: MultisiteBuilder, connection: Connection) -> None:
        """The siteurl option is returned."""
        multisite.add_site(1, "a.test").add_option(1, "siteurl", "https://a.test")
        assert read_site_url(connection, "wp_options") == "https://a.test"

    def test_read_site_url_missing(
        self, multisite: MultisiteBuilder, connection: Connection
    ) -> None:
        """A missing siteurl row yields None."""
        multisite.add_site(1, "a.test")
        assert read_site_url(connection, "wp_options") is None

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://a.test", "https"),
            ("HTTPS://a.test/blog", "https"),
            ("http://a.test", "http"),
            ("a.test", "http"),
            ("", "http"),
            (None, "http"),
        ],
    )
    def test_scheme_from_url(self, url: str | None, expected: str) -> None:
        """Only an explicit https URL resolves to https."""
        assert scheme_from_url(url) == expected
