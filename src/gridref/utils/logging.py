"""
Logging utility functions and decorators.

This module provides helpers for call tracing and performance tracking of
conversion routines.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Longest argument/result repr written to a trace line
MAX_REPR_LENGTH = 200


def _truncate(text: str, limit: int = MAX_REPR_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def log_function_call(
    log_args: bool = True,
    log_result: bool = True,
    log_level: int = logging.DEBUG,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator to log function calls with arguments and results.

    Large reprs (for example numpy arrays) are truncated.

    Args:
        log_args: Whether to log function arguments
        log_result: Whether to log function result
        log_level: Logging level to use

    Returns:
        Decorated function with logging

    Example:
        @log_function_call()
        def geodetic_to_mgrs(point, precision):
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            func_name = f"{func.__module__}.{func.__qualname__}"

            if log_args:
                args_repr = [repr(arg) for arg in args]
                kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
                all_args = _truncate(", ".join(args_repr + kwargs_repr))
                logger.log(log_level, f"Calling {func_name}({all_args})")
            else:
                logger.log(log_level, f"Calling {func_name}()")

            result = func(*args, **kwargs)

            if log_result:
                logger.log(log_level, f"{func_name} returned: {_truncate(repr(result))}")
            else:
                logger.log(log_level, f"{func_name} completed")

            return result

        return wrapper

    return decorator


def log_performance(
    log_level: int = logging.INFO,
    threshold_ms: Optional[float] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator to log function execution time.

    Args:
        log_level: Logging level to use
        threshold_ms: Only log if execution time exceeds this threshold (milliseconds)

    Returns:
        Decorated function with performance logging

    Example:
        @log_performance(threshold_ms=100)
        def convert_many(points):
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            func_name = f"{func.__module__}.{func.__qualname__}"
            start_time = time.perf_counter()

            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter() - start_time) * 1000

                if threshold_ms is None or duration_ms >= threshold_ms:
                    logger.log(
                        log_level,
                        f"{func_name} executed in {duration_ms:.2f}ms",
                        extra={"duration_ms": duration_ms, "function": func_name},
                    )

        return wrapper

    return decorator


class PerformanceTimer:
    """
    Context manager for timing code blocks.

    Usage:
        with PerformanceTimer("mgrs_batch", threshold_ms=50) as timer:
            refs = geodetic_to_mgrs_batch(lon, lat)
        # Logs the execution time when above the threshold
    """

    def __init__(
        self,
        operation_name: str,
        log_level: int = logging.INFO,
        threshold_ms: Optional[float] = None,
    ):
        """
        Initialize PerformanceTimer.

        Args:
            operation_name: Name of the operation being timed
            log_level: Logging level to use
            threshold_ms: Only log if execution time exceeds this threshold
        """
        self.operation_name = operation_name
        self.log_level = log_level
        self.threshold_ms = threshold_ms
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> "PerformanceTimer":
        """Start the timer."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Stop the timer and log the result."""
        self.end_time = time.perf_counter()
        if self.start_time is not None:
            self.duration_ms = (self.end_time - self.start_time) * 1000

            if self.threshold_ms is None or self.duration_ms >= self.threshold_ms:
                logger.log(
                    self.log_level,
                    f"{self.operation_name} completed in {self.duration_ms:.2f}ms",
                    extra={
                        "duration_ms": self.duration_ms,
                        "operation": self.operation_name,
                    },
                )
