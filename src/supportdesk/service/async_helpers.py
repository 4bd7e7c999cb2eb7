"""Event loop helpers for driving coroutines from synchronous code.

Flask routes are synchronous while the core services are async. These helpers
run a coroutine, or drain an async generator, on a private event loop.
"""

import asyncio
from collections.abc import AsyncGenerator, Iterator
from typing import Any, TypeVar

T = TypeVar("T")


def run_async(coro: Any) -> Any:
    """Run an async coroutine in a new event loop.

    This is useful for calling async functions from synchronous Flask routes.
    Creates a new event loop, runs the coroutine, and properly cleans up.

    Args:
        coro: An awaitable coroutine to execute

    Returns:
        The result of the coroutine

    Note:
        For CLI commands, prefer using asyncio.run() directly.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def iterate_async(agen: AsyncGenerator[T, None]) -> Iterator[T]:
    """Expose an async generator as a plain iterator.

    Each item is awaited on a dedicated event loop, so the generator can back
    a streamed Flask response.

    Args:
        agen: Async generator to drain

    Yields:
        Items produced by agen, in order
    """
    loop = asyncio.new_event_loop()
    try:
        while True:
            try:
                yield loop.run_until_complete(agen.__anext__())
            except StopAsyncIteration:
                break
    finally:
        loop.run_until_complete(agen.aclose())
        loop.close()
