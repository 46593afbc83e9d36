"""Tenant registry loading.

Reads the list of active sites from the network's ``blogs`` table.
Single-site installs have no registry; they are treated as one
tenant derived from the primary site URL.
"""

import logging
from urllib.parse import urlsplit

from sqlalchemy import Connection, text
from sqlalchemy.exc import SQLAlchemyError

from mssearch.core.errors import RegistryError
from mssearch.models.tenant import Tenant
from mssearch.scan.sql import quote_table
from mssearch.scan.tables import read_site_url, scheme_from_url, table_exists, table_names

logger = logging.getLogger(__name__)

REGISTRY_TABLE = "blogs"


def _normalize_path(path: str | None) -> str:
    path = path or "/"
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/"):
        path += "/"
    return path


def load_tenants(connection: Connection, prefix: str) -> list[Tenant]:
    """Load active tenants ordered by id.

    Deleted and spam sites are skipped.

    Args:
        connection: Open database connection.
        prefix: Shared table prefix.

    Returns:
        Tenants in ascending id order.

    Raises:
        RegistryError: If neither a registry nor a site URL is found,
            or the registry query fails.
        TableProbeError: If probing for the registry table fails.
    """
    registry = f"{prefix}{REGISTRY_TABLE}"
    if not table_exists(connection, registry):
        logger.info("No %s table, treating install as single site", registry)
        return [_single_site(connection, prefix)]

    table = quote_table(connection, registry)
    try:
        rows = connection.execute(
            text(
                f"SELECT blog_id, domain, path FROM {table} "  # nosec: B608
                "WHERE deleted = 0 AND spam = 0 ORDER BY blog_id"
            )
        ).all()
    except SQLAlchemyError as e:
        msg = f"Cannot read site registry {registry}: {e}"
        raise RegistryError(msg) from e

    return [
        Tenant(id=int(row[0]), domain=str(row[1]), path=_normalize_path(row[2])) for row in rows
    ]


def _single_site(connection: Connection, prefix: str) -> Tenant:
    """Build the only tenant of a single-site install."""
    options = table_names(prefix, 1).configuration
    if not table_exists(connection, options):
        msg = f"No site registry and no {options} table found for prefix '{prefix}'"
        raise RegistryError(msg)

    try:
        site_url = read_site_url(connection, options)
    except SQLAlchemyError as e:
        msg = f"Cannot read site URL from {options}: {e}"
        raise RegistryError(msg) from e

    parts = urlsplit(site_url or "")
    if not parts.netloc:
        msg = f"No usable siteurl in {options}"
        raise RegistryError(msg)

    return Tenant(
        id=1,
        domain=parts.netloc,
        path=_normalize_path(parts.path),
        scheme=scheme_from_url(site_url),
    )
