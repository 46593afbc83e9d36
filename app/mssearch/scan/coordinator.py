"""Scan coordinator: drives a run across every tenant.

Tenants are scanned strictly one after another in registry order.
A query failure on one tenant is reported inline and the run moves
on; only connection-level failures end the run early.
"""

import logging
import time
from collections.abc import Callable, Sequence

from rich.console import Console
from sqlalchemy import Connection
from sqlalchemy.exc import SQLAlchemyError

from mssearch.core.errors import DatabaseConnectionError, QueryExecutionError
from mssearch.models.tenant import Tenant
from mssearch.models.totals import RunTotals, TenantScanResult
from mssearch.scan.formatter import ResultFormatter
from mssearch.scan.scanner import TenantScanner
from mssearch.scan.tables import resolve_tables

logger = logging.getLogger(__name__)

# Emit a progress marker after this many tenants
PROGRESS_INTERVAL = 100


class ScanCoordinator:
    """Runs the tenant scanner over a list of tenants and keeps totals.

    RunTotals is a value threaded through the loop; the coordinator is
    the only place it changes.

    Example:
        >>> coordinator = ScanCoordinator(conn, "wp_", scanner, formatter, console)
        >>> totals = coordinator.run(tenants)
        >>> print(totals.total_matches)
    """

    def __init__(
        self,
        connection: Connection,
        prefix: str,
        scanner: TenantScanner,
        formatter: ResultFormatter,
        console: Console,
        *,
        quiet: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._connection = connection
        self._prefix = prefix
        self._scanner = scanner
        self._formatter = formatter
        self._console = console
        self._quiet = quiet
        self._clock = clock

    def run(self, tenants: Sequence[Tenant]) -> RunTotals:
        """Scan every tenant and emit per-tenant reports and the summary.

        Args:
            tenants: Tenants in registry order.

        Returns:
            Final RunTotals including elapsed time.

        Raises:
            DatabaseConnectionError: If the connection fails mid-run
                (includes TableProbeError).
        """
        started = self._clock()
        totals = RunTotals()
        show_progress = not (self._formatter.summary_only or self._quiet)

        for processed, tenant in enumerate(tenants, start=1):
            result = self.scan_tenant(tenant)
            totals = totals.add(result)

            if result.failed:
                self._console.print(
                    self._formatter.format_tenant_error(result.tenant, result.error or "")
                )
            elif result.count:
                self._report(result)

            if show_progress and processed % PROGRESS_INTERVAL == 0:
                self._console.print(self._formatter.format_progress(processed))

        totals = totals.finish(self._clock() - started)
        self._console.print(
            self._formatter.format_summary(totals, self._scanner.options.search_term)
        )
        return totals

    def scan_tenant(self, tenant: Tenant) -> TenantScanResult:
        """Resolve a tenant's tables and scan them, isolating query errors.

        Args:
            tenant: Tenant to scan.

        Returns:
            TenantScanResult; ``error`` is set when a query failed.

        Raises:
            DatabaseConnectionError: If the connection is unusable.
        """
        tables = resolve_tables(self._connection, self._prefix, tenant.id)
        if not tables.any_exists:
            logger.debug("Site %d has no searchable tables", tenant.id)

        try:
            return self._scanner.scan(tenant, tables)
        except QueryExecutionError as e:
            logger.warning("Scan of site %d failed: %s", tenant.id, e)
            self._rollback()
            return TenantScanResult(tenant=tenant, error=str(e))

    def _report(self, result: TenantScanResult) -> None:
        """Print the block for a tenant with matches."""
        self._console.print(self._formatter.format_tenant_header(result.tenant, result.count))
        if self._formatter.summary_only:
            return

        for record in result.records:
            self._console.print(self._formatter.format_match(record))
        self._console.print()

    def _rollback(self) -> None:
        """Reset the connection's transaction after a failed query."""
        try:
            self._connection.rollback()
        except SQLAlchemyError as e:
            msg = f"Database connection unusable after failed query: {e}"
            raise DatabaseConnectionError(msg) from e
