"""
Utility modules for Term Relay

Contains configuration management, logging setup, and error handling.
"""

from .config import Config
from .logging_setup import setup_logging
from .error_handler import (
    ErrorHandler,
    ErrorInfo,
    ErrorSeverity,
    ErrorCategory,
    RelayError,
    ProcessExitError,
)

__all__ = [
    "Config",
    "setup_logging",
    "ErrorHandler",
    "ErrorInfo",
    "ErrorSeverity",
    "ErrorCategory",
    "RelayError",
    "ProcessExitError",
]
