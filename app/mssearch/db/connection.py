"""Scoped database connection for a run.

The engine and its single connection are created before the tenant
loop and always disposed on exit, including on errors.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError

from mssearch.core.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


@contextmanager
def open_connection(url: URL | str) -> Iterator[Connection]:
    """Open a read connection and release it when the block exits.

    Args:
        url: SQLAlchemy database URL.

    Yields:
        An open Connection.

    Raises:
        DatabaseConnectionError: If the connection cannot be established.
    """
    try:
        engine = create_engine(url)
    except (SQLAlchemyError, ImportError) as e:
        msg = f"Invalid database URL: {e}"
        raise DatabaseConnectionError(msg) from e

    try:
        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            orig = getattr(e, "orig", None) or e
            msg = f"Cannot connect to database: {orig}"
            raise DatabaseConnectionError(msg) from e

        logger.debug("Connected to %s", engine.url.render_as_string(hide_password=True))
        try:
            yield connection
        finally:
            connection.close()
    finally:
        engine.dispose()
