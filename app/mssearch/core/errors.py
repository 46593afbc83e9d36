"""Exception hierarchy for multisite scanning.

Only connection-level failures are fatal to a run. Query failures are
raised per tenant and isolated by the coordinator.
"""


class ScanError(Exception):
    """Base exception for all scan errors."""


class ScanConfigError(ScanError):
    """Raised when scan options are contradictory or invalid."""


class InvalidPatternError(ScanError):
    """Raised when an exclusion pattern cannot be compiled."""


class DatabaseConnectionError(ScanError):
    """Raised when the database cannot be reached or authenticated."""


class TableProbeError(DatabaseConnectionError):
    """Raised when a table existence probe fails.

    A probe only fails when the connection itself is unusable, so this
    is fatal to the whole run.
    """

    def __init__(self, table: str, reason: str) -> None:
        self.table = table
        self.reason = reason
        super().__init__(f"Cannot check table {table}: {reason}")


class RegistryError(ScanError):
    """Raised when the list of sites cannot be loaded."""


class QueryExecutionError(ScanError):
    """Raised when a search query fails for a single tenant.

    Attributes:
        tenant_id: Site id the query ran against.
        source: Table kind that failed ('content', 'metadata', 'configuration').
    """

    def __init__(self, tenant_id: int, source: str, reason: str) -> None:
        self.tenant_id = tenant_id
        self.source = source
        self.reason = reason
        super().__init__(f"{source} query failed for site {tenant_id}: {reason}")
