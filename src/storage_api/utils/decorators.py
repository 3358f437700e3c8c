"""Decorator utilities for cross-cutting concerns."""
import time
import logging
import functools
from typing import Any, Callable, TypeVar, cast

from storage_api.errors import ProviderError

# Setup logging
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: F) -> F:
    """Decorator to log function execution time.

    Args:
        func: The function to decorate

    Returns:
        Decorated function that logs execution time
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = func(*args, **kwargs)
            duration = time.time() - start_time
            logger.debug(f"{func.__name__} completed in {duration:.3f}s")
            return result
        except Exception as e:
            duration = time.time() - start_time
            logger.error(f"{func.__name__} failed after {duration:.3f}s: {str(e)}")
            raise
    return cast(F, wrapper)


def raises_provider_error(func: F) -> F:
    """Decorator that re-raises any failure of a provider call as `ProviderError`.

    The original exception is kept as `__cause__`.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError.from_exception(e) from e
    return cast(F, wrapper)
