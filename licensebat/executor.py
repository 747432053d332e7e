"""Bounded-concurrency streaming of independent async operations."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import AsyncIterator, Awaitable, Iterable, TypeVar

from licensebat.constants import DEFAULT_RETRIEVER_BUFFER_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def stream_unordered(
    operations: Iterable[Awaitable[T]],
    limit: int = DEFAULT_RETRIEVER_BUFFER_SIZE,
) -> AsyncIterator[T]:
    """Run operations concurrently, yielding their results as they complete.

    At most `limit` operations are in flight at any time. Results come in
    completion order, not submission order. Every operation yields exactly
    one result; there are no retries.

    An exception raised by an operation propagates to the caller and the
    remaining operations are cancelled. Closing or cancelling the
    generator early also cancels the operations in flight and closes the
    ones that never started.

    Args:
        operations: Awaitables to run. Consumed lazily.
        limit: Maximum number of operations in flight.

    Yields:
        Each operation's result.

    Raises:
        ValueError: If limit is lower than 1.
    """
    iterator = iter(operations)
    pending: set[asyncio.Future[T]] = set()
    try:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        for operation in iterator:
            pending.add(asyncio.ensure_future(operation))
            if len(pending) >= limit:
                break

        while pending:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_COMPLETED
            )
            # Refill before yielding so the pool stays busy
            for _ in done:
                operation = next(iterator, None)
                if operation is None:
                    break
                pending.add(asyncio.ensure_future(operation))

            for task in done:
                yield task.result()
    finally:
        if pending:
            logger.debug("Cancelling %d operations in flight", len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        for operation in iterator:
            if inspect.iscoroutine(operation):
                operation.close()
