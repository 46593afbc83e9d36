"""mssearch - Full-text search across every site of a WordPress multisite."""

__version__ = "0.1.0"
