"""Bounded hand-off between a chunk producer and the HTTP response."""

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Generic, TypeVar

logger = logging.getLogger("dangbei-proxy")

T = TypeVar("T")

DEFAULT_CHANNEL_SIZE = 16

_END = object()


class ChunkChannel(Generic[T]):
    """Drains ``source`` in a producer task into a bounded queue.

    Iterating the channel yields the items in order. If the consumer stops
    early (client disconnect, cancellation), the producer task is cancelled
    and ``source`` is closed, which releases any upstream connection it
    holds. Exceptions raised by ``source`` are re-raised to the consumer.
    """

    def __init__(
        self, source: AsyncIterator[T], maxsize: int = DEFAULT_CHANNEL_SIZE
    ) -> None:
        self._source = source
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)

    async def _produce(self) -> None:
        try:
            async for item in self._source:
                await self._queue.put(item)
        except Exception as exc:
            await self._queue.put(exc)
            return
        finally:
            aclose = getattr(self._source, "aclose", None)
            if aclose is not None:
                await aclose()
        await self._queue.put(_END)

    async def __aiter__(self) -> AsyncIterator[T]:
        producer = asyncio.create_task(self._produce())
        try:
            while True:
                item = await self._queue.get()
                if item is _END:
                    break
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            if not producer.done():
                logger.debug("Chunk consumer went away; stopping producer")
                producer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await producer
