"""
Bounded single-consumer channel with an explicit end-of-stream state.

Producers ``await channel.send(item)`` and suspend while the channel is full.
The orchestrator calls ``close()`` exactly once after every producer has
finished; the consumer iterates with ``async for`` and stops after the last
item sent before the close. The end-of-stream marker is private to this
module, so no payload value can be mistaken for it.

Usage:
    channel: Channel[ExtractionResult] = Channel(capacity=50, name="documents")

    async for result in channel:
        write(result)
"""

import asyncio
from typing import Generic, TypeVar

from .errors import ChannelClosed

T = TypeVar("T")


class _EndOfStream:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<end-of-stream>"


_END_OF_STREAM = _EndOfStream()


class Channel(Generic[T]):
    def __init__(self, capacity: int, name: str = "channel"):
        if capacity <= 0:
            raise ValueError(f"channel capacity must be positive, got {capacity}")
        self.name = name
        self.capacity = capacity
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._exhausted = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    async def send(self, item: T) -> None:
        """Enqueue an item, suspending while the channel is full."""
        if self._closed:
            raise ChannelClosed(f"send on closed channel {self.name!r}")
        await self._queue.put(item)

    async def close(self) -> None:
        """Mark end-of-stream. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_END_OF_STREAM)

    def __aiter__(self) -> "Channel[T]":
        return self

    async def __anext__(self) -> T:
        if self._exhausted:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END_OF_STREAM:
            self._exhausted = True
            raise StopAsyncIteration
        return item
