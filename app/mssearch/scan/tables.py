"""Per-tenant table name derivation and existence probing.

Every site of a multisite network keeps its own copy of the content,
metadata and configuration tables in the shared schema. The primary
site uses the bare prefix; every other site inserts its id.
"""

import logging
from urllib.parse import urlsplit

from sqlalchemy import Connection, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from mssearch.core.errors import TableProbeError
from mssearch.models.tenant import SchemeType, TableSet
from mssearch.scan.sql import quote_table

logger = logging.getLogger(__name__)

CONTENT_TABLE = "posts"
METADATA_TABLE = "postmeta"
CONFIGURATION_TABLE = "options"

# Configuration key holding the canonical base URL of a site
SITE_URL_OPTION = "siteurl"


def tenant_prefix(prefix: str, tenant_id: int) -> str:
    """Return the table prefix for a tenant.

    Args:
        prefix: Shared prefix (e.g., 'wp_').
        tenant_id: Numeric site id.

    Returns:
        'wp_' for site 1, 'wp_<id>_' for all others.
    """
    if tenant_id == 1:
        return prefix
    return f"{prefix}{tenant_id}_"


def table_names(prefix: str, tenant_id: int) -> TableSet:
    """Derive the three table names for a tenant.

    Existence flags are left unset; see :func:`resolve_tables`.

    Args:
        prefix: Shared prefix.
        tenant_id: Numeric site id.

    Returns:
        TableSet with names only.
    """
    base = tenant_prefix(prefix, tenant_id)
    return TableSet(
        content=f"{base}{CONTENT_TABLE}",
        metadata=f"{base}{METADATA_TABLE}",
        configuration=f"{base}{CONFIGURATION_TABLE}",
    )


def table_exists(connection: Connection, table_name: str) -> bool:
    """Probe the schema for a table.

    A fresh inspector is used per call so nothing is cached between
    tenants.

    Args:
        connection: Open database connection.
        table_name: Unquoted table name.

    Returns:
        True if the table exists.

    Raises:
        TableProbeError: If the probe itself fails.
    """
    try:
        exists = inspect(connection).has_table(table_name)
    except SQLAlchemyError as e:
        raise TableProbeError(table_name, str(e)) from e

    logger.debug("Table %s exists: %s", table_name, exists)
    return exists


def resolve_tables(connection: Connection, prefix: str, tenant_id: int) -> TableSet:
    """Derive a tenant's tables and probe each one.

    Args:
        connection: Open database connection.
        prefix: Shared prefix.
        tenant_id: Numeric site id.

    Returns:
        TableSet with names and existence flags.

    Raises:
        TableProbeError: If any probe fails.
    """
    names = table_names(prefix, tenant_id)
    return TableSet(
        content=names.content,
        metadata=names.metadata,
        configuration=names.configuration,
        content_exists=table_exists(connection, names.content),
        metadata_exists=table_exists(connection, names.metadata),
        configuration_exists=table_exists(connection, names.configuration),
    )


def read_site_url(connection: Connection, configuration_table: str) -> str | None:
    """Read the canonical site URL setting from a configuration table.

    Args:
        connection: Open database connection.
        configuration_table: Unquoted configuration table name.

    Returns:
        The 'siteurl' value, or None if the row is missing.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the query fails.
    """
    table = quote_table(connection, configuration_table)
    row = connection.execute(
        text(f"SELECT option_value FROM {table} WHERE option_name = :name"),  # nosec: B608
        {"name": SITE_URL_OPTION},
    ).first()
    if row is None or row[0] is None:
        return None
    return str(row[0])


def scheme_from_url(url: str | None) -> SchemeType:
    """Extract the URL scheme, falling back to 'http'.

    Args:
        url: Site URL as stored in the configuration table.

    Returns:
        'https' if the URL uses it, 'http' otherwise.
    """
    if not url:
        return "http"
    try:
        scheme = urlsplit(url.strip()).scheme.lower()
    except ValueError:
        return "http"
    return "https" if scheme == "https" else "http"
