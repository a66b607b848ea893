# Core Module - Structured Logging
#
# structlog for structured operation events, stdlib logging everywhere else.
# Both are rendered through one handler so a single sink (stderr) carries
# JSON lines in production and readable console lines in development.
#
# Never pass secrets, keys, salts, IVs or envelopes to a logger.

import logging
import sys
from typing import Optional

import structlog

_HANDLER_NAME = "securevault"


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; the previous SecureVault handler is replaced.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ...)
        json_output: Render JSON lines instead of console output
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())


def get_logger(name: Optional[str] = None):
    """Get a structlog bound logger (stdlib-backed)."""
    return structlog.get_logger(name)
