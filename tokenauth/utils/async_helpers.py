"""Async utility functions bridging sync and async code."""

import asyncio
import functools
from typing import Any, Callable, Coroutine, TypeVar

T = TypeVar('T')


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run an async coroutine in a sync context.

    This is useful for Celery tasks and CLI commands that need to call
    async repository code.

    Args:
        coro: Async coroutine to run

    Returns:
        Result of the coroutine

    Raises:
        RuntimeError: If called from inside a running event loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    coro.close()
    raise RuntimeError("Cannot run async code from within an event loop")


async def run_in_executor(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking callable in the default thread pool.

    Used for CPU-bound work such as bcrypt so it does not stall the loop.

    Args:
        func: Blocking callable
        *args: Positional arguments for ``func``
        **kwargs: Keyword arguments for ``func``

    Returns:
        Result of ``func``
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))
