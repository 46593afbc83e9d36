"""Data models for mssearch.

This module exports the core data structures used throughout the application.
"""

from mssearch.models.match import MatchKind, MatchRecord
from mssearch.models.options import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_STATUSES,
    ScanOptions,
    ScanScope,
)
from mssearch.models.tenant import TableSet, Tenant
from mssearch.models.totals import RunTotals, TenantScanResult

__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_STATUSES",
    "MatchKind",
    "MatchRecord",
    "RunTotals",
    "ScanOptions",
    "ScanScope",
    "TableSet",
    "Tenant",
    "TenantScanResult",
]
