"""Timing decorator for rating and lifecycle operations."""

import inspect
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from beartype import beartype

from .logging_utils import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


@beartype
def performance_monitor(
    operation_name: str,
    max_duration_ms: int = 2000,
    log_slow_operations: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to time an operation.

    Durations are logged at DEBUG; anything slower than ``max_duration_ms``
    is logged as a warning.

    Args:
        operation_name: Name of the operation for monitoring
        max_duration_ms: Alert threshold in milliseconds
        log_slow_operations: Whether to log slow operations
    """

    def _record(start: float, success: bool) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        if log_slow_operations and duration_ms > max_duration_ms:
            logger.warning(
                "Slow operation %s took %.1fms (threshold %dms, success=%s)",
                operation_name,
                duration_ms,
                max_duration_ms,
                success,
            )
        else:
            logger.debug(
                "%s completed in %.2fms (success=%s)",
                operation_name,
                duration_ms,
                success,
            )

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                start = time.perf_counter()
                success = False
                try:
                    result = await func(*args, **kwargs)
                    success = True
                    return result
                finally:
                    _record(start, success)

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start = time.perf_counter()
            success = False
            try:
                result = func(*args, **kwargs)
                success = True
                return result
            finally:
                _record(start, success)

        return sync_wrapper

    return decorator
