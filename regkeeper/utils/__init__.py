"""
Utility helpers for regkeeper.

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from regkeeper.utils.filesystem import safe_read_file, safe_write_file

from regkeeper.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)

from regkeeper.utils.console import (
    format_support_flag,
    get_raw_console,
    print_error,
    print_issue_summary,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

from regkeeper.utils.http import HTTPClient

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "print_issue_summary",
    "format_support_flag",
    "get_raw_console",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    # HTTP
    "HTTPClient",
]
