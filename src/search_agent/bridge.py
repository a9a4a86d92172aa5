"""
Bridge channel.

An in-process queue merging events from several producers into the single
sequence a consumer pulls from. Producers may also post a failure, which the
consumer raises when it reaches it.
"""

import asyncio

from .types import AgentEvent

_CLOSED = object()


class _Failure:
    def __init__(self, error: BaseException):
        self.error = error


class BridgeChannel:
    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: AgentEvent) -> None:
        if self._closed:
            raise RuntimeError("Cannot emit into a closed bridge channel")
        self._queue.put_nowait(event)

    def fail(self, error: BaseException) -> None:
        if not self._closed:
            self._queue.put_nowait(_Failure(error))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def receive(self) -> AgentEvent | None:
        """Next event in arrival order; None once the channel is closed and empty."""
        item = await self._queue.get()
        if item is _CLOSED:
            # Keep returning None to any later receiver
            self._queue.put_nowait(_CLOSED)
            return None
        if isinstance(item, _Failure):
            raise item.error
        return item
