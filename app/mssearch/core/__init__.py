"""Core infrastructure for mssearch: paths, settings, theme, logging, errors."""
