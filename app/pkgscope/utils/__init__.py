"""Utility modules for pkgscope.

This module exports commonly used utility functions.
"""

from pkgscope.utils.formatting import (
    apply_theme,
    console,
    create_package_table,
    err_console,
    format_package_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from pkgscope.utils.shell import CommandResult, command_exists, run_command, run_interactive

__all__ = [
    "CommandResult",
    "apply_theme",
    "command_exists",
    "console",
    "create_package_table",
    "err_console",
    "format_package_row",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "run_interactive",
]
