import asyncio
import functools
from typing import Awaitable, Callable, TypeVar

from utils.logging import get_logger

logger = get_logger("utils.retry")

T = TypeVar("T")  # Generic type for return values


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay: float = 0.2,
    description: str = "operation",
) -> T:
    """
    Await ``operation`` until it succeeds, up to ``attempts`` times.

    Sleeps ``base_delay * 2**attempt`` between attempts (0.2s, 0.4s, ... by
    default) and never after the final one. Any exception counts as a failure.

    Raises:
        Exception: The last error once all attempts are used up
    """
    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            if attempt == attempts - 1:
                logger.error("%s failed after %s attempts: %s", description, attempts, e)
                raise
            delay = base_delay * (2**attempt)
            logger.warning(
                "%s attempt %s/%s failed: %s. Retrying in %.1fs", description, attempt + 1, attempts, e, delay
            )
            await asyncio.sleep(delay)
    raise ValueError("attempts must be at least 1")


def with_retries(attempts: int = 3, base_delay: float = 0.2):
    """Decorator form of ``retry_async`` for coroutine functions."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await retry_async(
                lambda: func(*args, **kwargs),
                attempts=attempts,
                base_delay=base_delay,
                description=func.__name__,
            )

        return wrapper

    return decorator
