"""Common utilities and shared functionality.

This package contains helper functions used by both the inbound adapters
(API, CLI) and the core services.
"""

from .exception_handler import (
    format_exception_json,
    get_http_status_code,
    log_exception,
)

__all__ = [
    "format_exception_json",
    "log_exception",
    "get_http_status_code",
]
