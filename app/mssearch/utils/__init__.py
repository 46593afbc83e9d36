"""Utility modules for mssearch.

This module exports commonly used console helpers.
"""

from mssearch.utils.formatting import console, err_console, print_error, print_rule

__all__ = [
    "console",
    "err_console",
    "print_error",
    "print_rule",
]
