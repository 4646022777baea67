"""
Async Utilities
===============

Drive async code from synchronous Flask handlers, which run without an
event loop of their own.
"""

import asyncio
import logging
from typing import AsyncIterator, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def iter_async_generator(agen: AsyncIterator[T]) -> Iterator[T]:
    """Iterate an async iterator from synchronous code.

    A private event loop advances ``agen`` one item per ``next()`` call, so
    nothing is read ahead of the consumer. Closing the returned generator
    early closes ``agen`` on the same loop before the loop is shut down.

    Exceptions raised by ``agen`` propagate to the caller unchanged.
    """
    if is_event_loop_running():
        raise RuntimeError("iter_async_generator cannot be used inside a running event loop")

    loop = asyncio.new_event_loop()
    finished = False
    try:
        while True:
            try:
                item = loop.run_until_complete(agen.__anext__())
            except StopAsyncIteration:
                finished = True
                return
            yield item
    finally:
        try:
            if not finished:
                aclose = getattr(agen, 'aclose', None)
                if aclose is not None:
                    loop.run_until_complete(aclose())
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()
            logger.debug("Closed private event loop for async iteration")


def is_event_loop_running() -> bool:
    """Check if there's currently an event loop running in this thread."""
    try:
        asyncio.get_running_loop()
        return True
    except RuntimeError:
        return False


__all__ = [
    'iter_async_generator',
    'is_event_loop_running',
]
