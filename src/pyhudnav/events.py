"""Outbound lane guidance event channel.

The engine produces lane guidance on its own threads. :meth:`LaneGuidanceBus.publish`
never blocks that thread: events go into a bounded buffer and are drained
on the bound asyncio loop, where listeners and streams receive them.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from collections.abc import Callable
from typing import Any

from pyhudnav._constants import DEFAULT_EVENT_BUFFER_SIZE
from pyhudnav.models.lane_guidance import LaneGuidanceEvent

_logger = logging.getLogger(__name__)

LaneGuidanceCallback = Callable[[LaneGuidanceEvent], None]

_CLOSED = object()


class Subscription:
    """Handle returned by :meth:`LaneGuidanceBus.subscribe`."""

    def __init__(self, bus: LaneGuidanceBus, callback: LaneGuidanceCallback) -> None:
        self._bus = bus
        self.callback = callback

    @property
    def active(self) -> bool:
        return self in self._bus._subscriptions

    def remove(self) -> None:
        """Stop receiving events. Calling it again is a no-op."""
        self._bus._remove_subscription(self)


class LaneGuidanceStream:
    """Async iterator over lane guidance events.

    Usage::

        async with bus.stream() as events:
            async for event in events:
                ...

    When the consumer falls behind and the queue is full, the newest
    event is dropped.
    """

    def __init__(self, bus: LaneGuidanceBus, maxsize: int) -> None:
        self._bus = bus
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _offer(self, event: LaneGuidanceEvent) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self._bus._note_drop()

    def close(self) -> None:
        """End iteration once already queued events are consumed."""
        if self._closed:
            return
        self._closed = True
        self._bus._remove_stream(self)
        if self._queue.full():
            self._queue.get_nowait()
            self._bus._note_drop()
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> LaneGuidanceStream:
        return self

    async def __anext__(self) -> LaneGuidanceEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        event: LaneGuidanceEvent = item
        return event

    async def __aenter__(self) -> LaneGuidanceStream:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()


class LaneGuidanceBus:
    """Single outbound channel from the engine to the host layer."""

    def __init__(self, *, buffer_size: int = DEFAULT_EVENT_BUFFER_SIZE) -> None:
        self._buffer: deque[LaneGuidanceEvent] = deque(maxlen=buffer_size)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._drain_scheduled = False
        self._subscriptions: list[Subscription] = []
        self._streams: list[LaneGuidanceStream] = []
        self._dropped = 0

    @property
    def dropped(self) -> int:
        """Events lost because a buffer or stream queue was full."""
        return self._dropped

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Deliver events on *loop* from now on."""
        self._loop = loop

    def detach(self) -> None:
        """Deliver events inline on the publishing thread."""
        self._loop = None
        self._buffer.clear()
        self._drain_scheduled = False

    def subscribe(self, callback: LaneGuidanceCallback) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def stream(self, maxsize: int = DEFAULT_EVENT_BUFFER_SIZE) -> LaneGuidanceStream:
        """Open an async stream of events. Must be called on the bus loop."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        stream = LaneGuidanceStream(self, maxsize)
        self._streams.append(stream)
        return stream

    def publish(self, event: LaneGuidanceEvent) -> None:
        """Hand *event* to the consumers without blocking. Safe from any thread."""
        loop = self._loop
        if loop is None:
            self._dispatch(event)
            return

        if len(self._buffer) == self._buffer.maxlen:
            self._note_drop()
        # Append before checking the flag; _drain clears it before popping.
        self._buffer.append(event)
        if self._drain_scheduled:
            return
        self._drain_scheduled = True
        try:
            loop.call_soon_threadsafe(self._drain)
        except RuntimeError:
            self._drain_scheduled = False
            _logger.debug("Event loop closed; lane guidance event dropped", exc_info=True)

    def close_streams(self) -> None:
        """End all open streams; listeners stay subscribed."""
        for stream in list(self._streams):
            stream.close()

    def close(self) -> None:
        """End all streams and drop all listeners."""
        self.close_streams()
        self._subscriptions.clear()
        self.detach()

    def _drain(self) -> None:
        self._drain_scheduled = False
        while True:
            try:
                event = self._buffer.popleft()
            except IndexError:
                return
            self._dispatch(event)

    def _dispatch(self, event: LaneGuidanceEvent) -> None:
        for subscription in list(self._subscriptions):
            try:
                subscription.callback(event)
            except Exception:
                _logger.debug("%s listener failed", event.event_name, exc_info=True)
        for stream in list(self._streams):
            stream._offer(event)

    def _note_drop(self) -> None:
        self._dropped += 1

    def _remove_subscription(self, subscription: Subscription) -> None:
        with contextlib.suppress(ValueError):
            self._subscriptions.remove(subscription)

    def _remove_stream(self, stream: LaneGuidanceStream) -> None:
        with contextlib.suppress(ValueError):
            self._streams.remove(stream)
