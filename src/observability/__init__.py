"""
Observability Module.

Structured logging for benchmark runs, with the run ID and the backend
under test attached to every event.
"""

from src.observability.logging import (
    LogContext,
    configure_from_settings,
    configure_logging,
    get_logger,
    run_id_var,
)

__all__ = [
    "LogContext",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "run_id_var",
]
