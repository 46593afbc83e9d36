"""Tenant scanner: searches one site's tables for the search term.

Searches the content, metadata and configuration tables of a single
tenant in that order and turns every surviving row into a MatchRecord.
Metadata and configuration keys matching an exclusion pattern are
dropped before they are counted.
"""

import logging
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from sqlalchemy import Connection, bindparam, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from mssearch.core.errors import DatabaseConnectionError, QueryExecutionError
from mssearch.models.match import MatchKind, MatchRecord
from mssearch.models.options import REVISION_TYPE, ScanOptions
from mssearch.models.tenant import TableSet, Tenant
from mssearch.models.totals import TenantScanResult
from mssearch.scan.patterns import MatchRule, build_exclusion_rules, matches_any
from mssearch.scan.sql import contains_filter, quote_table
from mssearch.scan.tables import read_site_url, scheme_from_url

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

# Default management tool used in hints
DEFAULT_CLI_COMMAND = "wp"


class TenantScanner:
    """Searches the tables of one tenant at a time.

    The scanner holds the open connection, the run's options and the
    compiled exclusion rules; it keeps no state between tenants.

    Example:
        >>> scanner = TenantScanner(connection, options)
        >>> result = scanner.scan(tenant, resolve_tables(connection, "wp_", tenant.id))
        >>> print(result.count)
    """

    def __init__(
        self,
        connection: Connection,
        options: ScanOptions,
        *,
        cli_command: str = DEFAULT_CLI_COMMAND,
        rules: Sequence[MatchRule] | None = None,
    ) -> None:
        self._connection = connection
        self._options = options
        self._cli_command = cli_command
        self._rules: tuple[MatchRule, ...] = (
            tuple(rules) if rules is not None else build_exclusion_rules(options.exclude_patterns)
        )

    @property
    def options(self) -> ScanOptions:
        """Return the option set this scanner runs with."""
        return self._options

    def scan(self, tenant: Tenant, tables: TableSet) -> TenantScanResult:
        """Search all in-scope tables of a tenant.

        Args:
            tenant: Tenant to scan.
            tables: The tenant's tables with existence flags.

        Returns:
            TenantScanResult with records in table scan order.

        Raises:
            QueryExecutionError: If a search query fails.
            DatabaseConnectionError: If the connection was lost.
        """
        scope = self._options.scope

        content_rows: list[Row] = []
        if scope.includes_content and tables.content_exists:
            content_rows = self._search_content(tenant, tables)
        elif scope.includes_content:
            logger.debug("Site %d: no content table %s", tenant.id, tables.content)

        meta_rows: list[Row] = []
        if scope.includes_metadata and tables.metadata_exists and tables.content_exists:
            meta_rows = self._search_metadata(tenant, tables)
        elif scope.includes_metadata and tables.metadata_exists:
            # Every metadata row needs its owning item
            logger.debug("Site %d: no content table %s for metadata", tenant.id, tables.content)
        elif scope.includes_metadata:
            logger.debug("Site %d: no metadata table %s", tenant.id, tables.metadata)

        option_rows: list[Row] = []
        if scope.includes_configuration and tables.configuration_exists:
            option_rows = self._search_configuration(tenant, tables)
        elif scope.includes_configuration:
            logger.debug("Site %d: no configuration table %s", tenant.id, tables.configuration)

        if not (content_rows or meta_rows or option_rows):
            return TenantScanResult(tenant=tenant)

        # Links are only needed once something matched
        tenant = self._resolve_scheme(tenant, tables)

        records: list[MatchRecord] = []
        records.extend(self._content_record(tenant, row) for row in content_rows)
        records.extend(self._metadata_record(tenant, row) for row in meta_rows)
        records.extend(self._configuration_record(tenant, row) for row in option_rows)
        return TenantScanResult(tenant=tenant, records=tuple(records))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _search_content(self, tenant: Tenant, tables: TableSet) -> list[Row]:
        """Query item bodies for the term under the status filter."""
        table = quote_table(self._connection, tables.content)
        clause, params = self._contains("post_content")

        sql = (
            "SELECT ID, post_title, post_type, post_status, post_parent "  # nosec: B608
            f"FROM {table} WHERE {clause} AND post_status IN :statuses"
        )
        params["statuses"] = list(self._options.statuses)

        # A published-only filter already rules out revisions
        if self._options.exclude_revisions and not self._options.published_only:
            sql += " AND post_type <> :revision_type"
            params["revision_type"] = REVISION_TYPE

        statement = text(sql).bindparams(bindparam("statuses", expanding=True))
        return self._fetch(tenant, MatchKind.CONTENT, statement, params)

    def _search_metadata(self, tenant: Tenant, tables: TableSet) -> list[Row]:
        """Query metadata values joined to their owning items."""
        meta_table = quote_table(self._connection, tables.metadata)
        content_table = quote_table(self._connection, tables.content)
        clause, params = self._contains("pm.meta_value")

        statement = text(
            "SELECT pm.post_id, pm.meta_key, p.post_title, p.post_type, p.post_status "
            f"FROM {meta_table} pm JOIN {content_table} p ON pm.post_id = p.ID "  # nosec: B608
            f"WHERE {clause}"
        )
        rows = self._fetch(tenant, MatchKind.METADATA, statement, params)
        return [row for row in rows if not self._is_excluded(tenant, str(row["meta_key"]))]

    def _search_configuration(self, tenant: Tenant, tables: TableSet) -> list[Row]:
        """Query configuration values and keys for the term."""
        table = quote_table(self._connection, tables.configuration)
        value_clause, params = self._contains("option_value")
        name_clause, _ = self._contains("option_name")

        statement = text(
            f"SELECT option_id, option_name FROM {table} "  # nosec: B608
            f"WHERE ({value_clause} OR {name_clause})"
        )
        rows = self._fetch(tenant, MatchKind.CONFIGURATION, statement, params)
        return [row for row in rows if not self._is_excluded(tenant, str(row["option_name"]))]

    def _contains(self, column: str) -> tuple[str, dict[str, Any]]:
        """Build the substring filter for a column."""
        clause, params = contains_filter(
            self._connection.dialect.name,
            column,
            "term",
            self._options.search_term,
            self._options.case_sensitive,
        )
        return clause, dict(params)

    def _fetch(
        self,
        tenant: Tenant,
        kind: MatchKind,
        statement: Any,
        params: dict[str, Any],
    ) -> list[Row]:
        """Execute a search query and return its rows.

        Raises:
            DatabaseConnectionError: If the connection was invalidated.
            QueryExecutionError: For any other database error.
        """
        try:
            result = self._connection.execute(statement, params)
            return list(result.mappings().all())
        except DBAPIError as e:
            if e.connection_invalidated:
                msg = f"Lost database connection while scanning site {tenant.id}: {e.orig}"
                raise DatabaseConnectionError(msg) from e
            raise QueryExecutionError(tenant.id, kind.value, str(e.orig)) from e
        except SQLAlchemyError as e:
            raise QueryExecutionError(tenant.id, kind.value, str(e)) from e

    def _is_excluded(self, tenant: Tenant, key: str) -> bool:
        """Check a metadata/configuration key against the exclusion rules."""
        if matches_any(key, self._rules):
            logger.debug("Site %d: excluded key %s", tenant.id, key)
            return True
        return False

    def _resolve_scheme(self, tenant: Tenant, tables: TableSet) -> Tenant:
        """Return the tenant with its scheme read from the site URL setting.

        An unreadable setting leaves the tenant on 'http'.

        Raises:
            DatabaseConnectionError: If the connection was lost.
        """
        if not tables.configuration_exists:
            return tenant
        try:
            site_url = read_site_url(self._connection, tables.configuration)
        except SQLAlchemyError as e:
            if isinstance(e, DBAPIError) and e.connection_invalidated:
                msg = f"Lost database connection while scanning site {tenant.id}: {e.orig}"
                raise DatabaseConnectionError(msg) from e
            logger.debug("Site %d: cannot read site URL: %s", tenant.id, e)
            self._rollback()
            return tenant
        return replace(tenant, scheme=scheme_from_url(site_url))

    def _rollback(self) -> None:
        """Reset the transaction after a failed lookup."""
        try:
            self._connection.rollback()
        except SQLAlchemyError as e:
            msg = f"Database connection unusable after failed query: {e}"
            raise DatabaseConnectionError(msg) from e

    # ------------------------------------------------------------------
    # Record construction
    # ------------------------------------------------------------------

    def _content_record(self, tenant: Tenant, row: Row) -> MatchRecord:
        """Build a record for a matching content item."""
        item_id = int(row["ID"])
        title = _title(row["post_title"])
        item_type = str(row["post_type"])
        status = str(row["post_status"])
        parent_id = int(row["post_parent"] or 0) or None

        location = f'Post: "{title}" (ID: {item_id}, Type: {item_type}, Status: {status}'
        if item_type == REVISION_TYPE and parent_id is not None:
            location += f", Parent: {parent_id}"
        location += ")"

        return MatchRecord(
            kind=MatchKind.CONTENT,
            title=title,
            id=item_id,
            location_text=location,
            link=_edit_link(tenant, item_id),
            item_type=item_type,
            extra_status=status,
            parent_id=parent_id if item_type == REVISION_TYPE else None,
        )

    def _metadata_record(self, tenant: Tenant, row: Row) -> MatchRecord:
        """Build a record for a matching metadata value."""
        item_id = int(row["post_id"])
        key = str(row["meta_key"])
        title = _title(row["post_title"])

        return MatchRecord(
            kind=MatchKind.METADATA,
            title=title,
            id=item_id,
            location_text=f'Meta: "{title}" (ID: {item_id}, Key: {key})',
            link=_edit_link(tenant, item_id),
            key=key,
            item_type=str(row["post_type"]),
            extra_status=str(row["post_status"]),
            management_hint=(
                f"{self._cli_command} --url={tenant.site_label} "
                f"post meta get {item_id} {shlex.quote(key)}"
            ),
        )

    def _configuration_record(self, tenant: Tenant, row: Row) -> MatchRecord:
        """Build a record for a matching configuration setting."""
        option_id = int(row["option_id"])
        name = str(row["option_name"])

        return MatchRecord(
            kind=MatchKind.CONFIGURATION,
            title=name,
            id=option_id,
            location_text=f"Option: {name} (ID: {option_id})",
            link=f"{tenant.base_url}wp-admin/options-general.php",
            key=name,
            management_hint=(
                f"{self._cli_command} --url={tenant.site_label} option get {shlex.quote(name)}"
            ),
        )


def _title(value: object) -> str:
    """Return a display title, substituting a placeholder for blanks."""
    title = str(value).strip() if value is not None else ""
    return title or "(no title)"


def _edit_link(tenant: Tenant, item_id: int) -> str:
    """Return the admin edit screen link for an item."""
    return f"{tenant.base_url}wp-admin/post.php?post={item_id}&action=edit"
