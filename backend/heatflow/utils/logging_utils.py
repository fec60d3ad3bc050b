"""
Structured logging helpers

Parsers and the engine report their work through these helpers so every
record carries an ``operation`` name, a ``context`` dict and, where timed,
``duration_seconds``.
"""

import logging
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

T = TypeVar('T')


def _extra(operation: str, context: Dict[str, Any], status: str, **fields: Any) -> Dict[str, Any]:
    return {'operation': operation, 'context': context, 'status': status, **fields}


@contextmanager
def log_operation(operation_name: str, context: Dict[str, Any], logger: Optional[logging.Logger] = None,
                  level: int = logging.INFO) -> Iterator[None]:
    """
    Log the start, outcome and duration of a block.

    Success is logged at ``level``; a failure is logged as a warning and the
    exception propagates unchanged.

    Usage:
        with log_operation("weather_reduction", {"file": "site.epw"}, logger):
            climate = parse_weather_text(text)
    """
    logger = logger or logging.getLogger(__name__)
    started = time.perf_counter()
    logger.debug(f"{operation_name} started", extra=_extra(operation_name, context, 'started'))

    try:
        yield
    except Exception as e:
        elapsed = time.perf_counter() - started
        logger.warning(
            f"{operation_name} failed after {elapsed:.3f}s: {e}",
            extra=_extra(operation_name, context, 'failed', duration_seconds=elapsed,
                         error_type=type(e).__name__),
        )
        raise

    elapsed = time.perf_counter() - started
    logger.log(
        level,
        f"{operation_name} finished in {elapsed:.3f}s",
        extra=_extra(operation_name, context, 'completed', duration_seconds=elapsed),
    )


def log_with_context(level: str, message: str, context: Dict[str, Any],
                     logger: Optional[logging.Logger] = None) -> None:
    """Log message at a named level (debug, info, warning, ...) with a context dict attached"""
    logger = logger or logging.getLogger(__name__)
    logger.log(logging.getLevelName(level.upper()), message, extra={'context': context})


def timed_operation(operation_name: Optional[str] = None, level: int = logging.DEBUG):
    """
    Decorator that logs how long each call took to the wrapped function's module logger.

    Usage:
        @timed_operation("heat_transfer_compute")
        def compute(inputs):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = operation_name or func.__name__
        func_logger = logging.getLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                elapsed = time.perf_counter() - started
                func_logger.error(f"[TIMING] {name} raised after {elapsed:.4f}s")
                raise
            elapsed = time.perf_counter() - started
            func_logger.log(level, f"[TIMING] {name} took {elapsed:.4f}s")
            return result

        return wrapper
    return decorator