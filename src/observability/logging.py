"""
Structured Logging Configuration.

Benchmark runs log through structlog. Every event carries the active run ID,
and anything bound with ``LogContext`` (usually the backend under test).
Output is JSON for archived runs or a colored console for interactive use.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any, Literal

import structlog
from structlog.types import EventDict, WrappedLogger

# ID of the benchmark run in progress, set by the runner
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)

REDACTED = "***REDACTED***"

# Substrings marking a key whose value must never reach the logs
SENSITIVE_KEY_PARTS = ("password", "secret", "token", "credential", "dsn", "api_key")

# Driver loggers that are too chatty below WARNING
QUIET_LOGGERS = ("asyncio", "cassandra", "asyncpg", "clickhouse_connect")


class LogContext:
    """
    Bind extra fields to every log event inside a ``with`` block.

    Usage:
        with LogContext(backend="timescaledb"):
            logger.info("Writing sellers")
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._bound = None

    def __enter__(self) -> "LogContext":
        self._bound = structlog.contextvars.bound_contextvars(**self.fields)
        self._bound.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self._bound.__exit__(exc_type, exc_val, exc_tb)
        return False


def add_run_id(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp the event with the active run ID, if any."""
    run_id = run_id_var.get()
    if run_id:
        event_dict.setdefault("run_id", run_id)
    return event_dict


def _is_sensitive(key: Any) -> bool:
    return isinstance(key, str) and any(part in key.lower() for part in SENSITIVE_KEY_PARTS)


def _redact(key: Any, value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _redact(k, v) for k, v in value.items()}
    if _is_sensitive(key) and value is not None:
        return REDACTED
    return value


def censor_sensitive_data(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace connection secrets (passwords, DSNs, tokens) with a marker."""
    return {key: _redact(key, value) for key, value in event_dict.items()}


def configure_logging(
    level: str = "INFO",
    format: Literal["json", "console"] = "console",
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: "json" for archived runs, "console" for terminals
    """
    renderer: structlog.types.Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_run_id,
            censor_sensitive_data,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_settings(settings: Any) -> None:
    """Configure logging from the application ``Settings``."""
    configure_logging(level=settings.log_level, format=settings.observability.log_format)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, usually for ``__name__``."""
    return structlog.get_logger(name)
