"""Scan engine for multisite text search.

This module exports the pattern matcher, table resolver, tenant
scanner, coordinator and result formatter.
"""

from mssearch.scan.coordinator import ScanCoordinator
from mssearch.scan.formatter import ResultFormatter
from mssearch.scan.patterns import build_exclusion_rules, compile_pattern, matches_any
from mssearch.scan.scanner import TenantScanner
from mssearch.scan.tables import resolve_tables, table_exists, table_names

__all__ = [
    "ResultFormatter",
    "ScanCoordinator",
    "TenantScanner",
    "build_exclusion_rules",
    "compile_pattern",
    "matches_any",
    "resolve_tables",
    "table_exists",
    "table_names",
]
