"""
Structured logging configuration with correlation ID support.
Provides a JSON log format for aggregation and a plain format for local runs.

The correlation id lives in a ContextVar, so every asyncio task started for
a page load carries its own id through the fetch and resolution steps.
"""

import inspect
import functools
import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from product_resolver import config

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

_CONTEXT_FIELDS = ("product_id", "slug", "model_tag", "status_code")


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Set correlation ID for the current context."""
    cid = correlation_id or generate_correlation_id()
    correlation_id_var.set(cid)
    return cid


def get_correlation_id() -> str:
    """Get correlation ID for the current context."""
    return correlation_id_var.get()


class StructuredJsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    One object per line, suitable for log aggregation.
    """

    def __init__(self, service_name: str = "product-resolver"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "correlation_id": get_correlation_id(),
        }

        if record.funcName:
            log_data["function"] = record.funcName

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        if hasattr(record, "duration_ms"):
            log_data["duration_ms"] = record.duration_ms
        if hasattr(record, "metrics"):
            log_data["metrics"] = record.metrics

        return json.dumps(log_data, default=str)


class ProductLogger(logging.LoggerAdapter):
    """Logger adapter bound to a specific product."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def bind_product(logger: logging.Logger, product_id: str) -> ProductLogger:
    """Return a logger that tags every record with ``product_id``."""
    return ProductLogger(logger, {"product_id": product_id})


def configure_logging(
    level: str = "INFO",
    service_name: str = "product-resolver",
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure logging for the host application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        service_name: Name of the service for log identification
        json_format: Emit one JSON object per record instead of plain text

    Returns:
        The configured root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if json_format:
        handler.setFormatter(StructuredJsonFormatter(service_name))
    else:
        handler.setFormatter(
            logging.Formatter(
                "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"
            )
        )

    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root_logger


def configure_logging_from_env() -> logging.Logger:
    """Configure logging from LOG_LEVEL, LOG_FORMAT and SERVICE_NAME."""
    return configure_logging(
        level=config.LOG_LEVEL,
        service_name=config.SERVICE_NAME,
        json_format=config.LOG_FORMAT == "json",
    )


def log_execution_time(logger: logging.Logger, level: int = logging.DEBUG):
    """
    Decorator to log function execution time. Works on coroutines too.

    Example:
        @log_execution_time(logger)
        async def resolve(self, product, current_id):
            ...
    """

    def decorator(func):
        def _log_success(start_time: float) -> None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.log(
                level,
                f"{func.__name__} completed",
                extra={"duration_ms": round(duration_ms, 2)},
            )

        def _log_failure(start_time: float, exc: BaseException) -> None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{func.__name__} failed after {duration_ms:.2f}ms: {exc}",
                extra={"duration_ms": round(duration_ms, 2)},
                exc_info=True,
            )

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(start_time, e)
                    raise
                _log_success(start_time)
                return result
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_failure(start_time, e)
                raise
            _log_success(start_time)
            return result
        return wrapper
    return decorator
