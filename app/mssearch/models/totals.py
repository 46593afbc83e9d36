"""Run accounting models.

RunTotals is an immutable value threaded through the coordinator's
loop; each tenant result produces the next value.
"""

from dataclasses import dataclass, field, replace

from mssearch.models.match import MatchRecord
from mssearch.models.tenant import Tenant


@dataclass(frozen=True, slots=True)
class TenantScanResult:
    """Outcome of scanning one tenant.

    Attributes:
        tenant: The scanned tenant (with resolved scheme).
        records: Matches in table scan order.
        error: Error message when a query failed for this tenant.
    """

    tenant: Tenant
    records: tuple[MatchRecord, ...] = field(default=())
    error: str | None = field(default=None)

    @property
    def count(self) -> int:
        """Return the number of matches for the tenant."""
        return len(self.records)

    @property
    def failed(self) -> bool:
        """Check if scanning this tenant failed."""
        return self.error is not None


@dataclass(frozen=True, slots=True)
class RunTotals:
    """Aggregated counters for a whole run.

    Attributes:
        total_matches: Matches across all tenants.
        tenants_with_matches: Tenants with at least one match.
        tenants_scanned: Tenants processed, including failed ones.
        tenants_failed: Tenants whose scan raised a query error.
        elapsed_seconds: Wall-clock duration of the run.
    """

    total_matches: int = 0
    tenants_with_matches: int = 0
    tenants_scanned: int = 0
    tenants_failed: int = 0
    elapsed_seconds: float = 0.0

    def add(self, result: TenantScanResult) -> "RunTotals":
        """Return new totals with a tenant result accounted for.

        Args:
            result: Outcome of scanning one tenant.

        Returns:
            Updated RunTotals.
        """
        return replace(
            self,
            total_matches=self.total_matches + result.count,
            tenants_with_matches=self.tenants_with_matches + (1 if result.count else 0),
            tenants_scanned=self.tenants_scanned + 1,
            tenants_failed=self.tenants_failed + (1 if result.failed else 0),
        )

    def finish(self, elapsed_seconds: float) -> "RunTotals":
        """Return final totals carrying the run duration."""
        return replace(self, elapsed_seconds=elapsed_seconds)

    @property
    def match_rate(self) -> float | None:
        """Percentage of scanned tenants with matches, one decimal.

        Returns:
            Percentage, or None when nothing matched.
        """
        if self.total_matches == 0 or self.tenants_scanned == 0:
            return None
        return round(self.tenants_with_matches / self.tenants_scanned * 100, 1)
