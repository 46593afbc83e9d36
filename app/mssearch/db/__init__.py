"""Database access: environment detection, connection scope and site registry."""

from mssearch.db.connection import open_connection
from mssearch.db.environment import (
    ConnectionConfig,
    detect_environment,
    detect_table_prefix,
    management_command,
)
from mssearch.db.registry import load_tenants

__all__ = [
    "ConnectionConfig",
    "detect_environment",
    "detect_table_prefix",
    "load_tenants",
    "management_command",
    "open_connection",
]
