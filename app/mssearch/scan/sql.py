"""SQL fragments for literal substring search.

Search terms are always bound parameters. LIKE wildcards inside the
term are escaped so the term matches as a plain substring.
"""

from sqlalchemy import Connection

LIKE_ESCAPE = "!"

# Binary collation used for case-sensitive matching on MySQL/MariaDB
MYSQL_BINARY_COLLATION = "utf8mb4_bin"


def like_pattern(term: str) -> str:
    """Build a LIKE pattern matching the term anywhere in a value.

    Args:
        term: Literal search term.

    Returns:
        Escaped pattern wrapped in '%' wildcards.
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def contains_filter(
    dialect_name: str,
    column: str,
    param: str,
    term: str,
    case_sensitive: bool,
) -> tuple[str, dict[str, str]]:
    """Build a WHERE fragment testing a column for the search term.

    Args:
        dialect_name: SQLAlchemy dialect name ('mysql', 'sqlite', ...).
        column: Column expression to test.
        param: Name of the bound parameter.
        term: Literal search term.
        case_sensitive: Whether matching respects case.

    Returns:
        Tuple of (SQL boolean expression, bound parameters).
    """
    pattern = {param: like_pattern(term)}
    like = f"{column} LIKE :{param} ESCAPE '{LIKE_ESCAPE}'"

    if dialect_name in ("mysql", "mariadb"):
        if case_sensitive:
            clause = (
                f"{column} LIKE :{param} COLLATE {MYSQL_BINARY_COLLATION} ESCAPE '{LIKE_ESCAPE}'"
            )
            return clause, pattern
        return like, pattern

    if dialect_name == "sqlite":
        # SQLite LIKE ignores ASCII case and cannot be switched per query
        if case_sensitive:
            return f"instr({column}, :{param}) > 0", {param: term}
        return like, pattern

    if case_sensitive:
        return like, pattern
    return f"LOWER({column}) LIKE LOWER(:{param}) ESCAPE '{LIKE_ESCAPE}'", pattern


def quote_table(connection: Connection, name: str) -> str:
    """Quote a table name for the connection's dialect.

    Args:
        connection: Open database connection.
        name: Unquoted table name.

    Returns:
        Quoted identifier safe to embed in SQL text.
    """
    return connection.dialect.identifier_preparer.quote(name)
