# Structured logging for build runs.
# Every event of a run carries the run's correlation id and, once bound,
# the run context (run_id, store path).

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional, TextIO

import structlog

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


def get_correlation_id() -> str:
    """Get or create the correlation id of the current context"""
    corr_id = correlation_id_ctx.get()
    if corr_id is None:
        corr_id = str(uuid.uuid4())
        correlation_id_ctx.set(corr_id)
    return corr_id


def set_correlation_id(corr_id: str) -> None:
    correlation_id_ctx.set(corr_id)


def add_correlation_id(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor: stamp the correlation id when one is set"""
    corr_id = correlation_id_ctx.get()
    if corr_id:
        event_dict["correlation_id"] = corr_id
    return event_dict


def bind_run_context(run_id: str, **fields: Any) -> None:
    """
    Tag every following event in this context with the build run.

    Sets the correlation id to ``run_id`` and binds the extra fields
    through structlog contextvars. Tasks created afterwards inherit both.
    """
    set_correlation_id(run_id)
    structlog.contextvars.bind_contextvars(run_id=run_id, **fields)


def clear_run_context() -> None:
    structlog.contextvars.clear_contextvars()


def setup_logging(
    log_level: str = "INFO",
    *,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure stdlib logging and structlog for a build run.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines; otherwise the console renderer
        stream: Output stream, stdout by default
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_correlation_id,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
