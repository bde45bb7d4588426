"""Utility modules for archon.

This module exports commonly used utility functions.
"""

from archon.utils.fileops import copy_file_or_dir
from archon.utils.formatting import (
    console,
    create_entry_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "copy_file_or_dir",
    "create_entry_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
