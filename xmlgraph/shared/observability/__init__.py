# Observability package
from .logging import (
    bind_run_context,
    clear_run_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)
from .metrics import get_metrics

__all__ = [
    "bind_run_context",
    "clear_run_context",
    "get_logger",
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "get_metrics",
]
