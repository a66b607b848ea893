# Core Module - Shared Utilities
#
# Structured logging shared by the vault core, the API and the CLI.

from .log_config import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
