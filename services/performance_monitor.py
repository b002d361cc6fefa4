"""
Document Store Performance Monitor

Decorators for timing store reads/writes and statistics runs.
Slow operations are logged as warnings.
"""

import time
from functools import wraps

from logging_config import logger

# Threshold in seconds for what constitutes a "slow" store operation
SLOW_QUERY_THRESHOLD = 1.0


def monitor_query(operation_name: str, slow_threshold: float | None = None):
    """
    Decorator to monitor document store performance

    Args:
        operation_name: Descriptive name of the operation being monitored
        slow_threshold: Override default slow threshold in seconds

    Usage:
        @monitor_query("document_store_get")
        async def get(self, collection, key):
            ...
    """
    threshold = slow_threshold or SLOW_QUERY_THRESHOLD

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    f"Query failed: {operation_name}",
                    extra={
                        "operation": operation_name,
                        "duration_seconds": round(elapsed, 3),
                        "error": str(e),
                    },
                )
                raise

            elapsed = time.time() - start_time
            if elapsed > threshold:
                logger.warning(
                    f"Slow query detected: {operation_name}",
                    extra={
                        "operation": operation_name,
                        "duration_seconds": round(elapsed, 3),
                        "function": func.__name__,
                        "threshold": threshold,
                    },
                )
            return result

        return wrapper

    return decorator


def log_performance(func):
    """Decorator to log execution time of a statistics operation"""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.time()
        func_name = func.__name__

        logger.info(f"Starting {func_name}...")

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            elapsed = time.time() - start_time
            logger.error(f"{func_name} failed after {elapsed:.3f}s: {str(e)}")
            raise

        elapsed = time.time() - start_time
        logger.info(f"{func_name} completed in {elapsed:.3f}s")
        return result

    return wrapper
