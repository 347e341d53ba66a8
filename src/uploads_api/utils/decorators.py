"""Decorator utilities for cross-cutting concerns."""
import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_duration(operation: Optional[str] = None, logger_name: Optional[str] = None) -> Callable[[F], F]:
    """Log how long an async pipeline operation took.

    Args:
        operation: Label used in the log line (defaults to the function's qualified name)
        logger_name: Optional logger name (defaults to this module's logger)

    Returns:
        Decorator for coroutine functions
    """
    duration_logger = logging.getLogger(logger_name) if logger_name else logger

    def decorator(func: F) -> F:
        label = operation or func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                elapsed_ms = (time.perf_counter() - start) * 1000
                duration_logger.error("%s raised after %.1fms: %s", label, elapsed_ms, e)
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                duration_logger.debug("%s finished in %.1fms", label, elapsed_ms)
        return cast(F, wrapper)

    return decorator
