"""
Streaming bridge: runs a blocking walk on a dedicated thread and relays its items
to an asyncio consumer through a bounded queue.

The producer blocks while the queue is full, so at most `capacity` items are
read ahead. Closing the stream (or dropping it) makes the producer's next send
fail with `ChannelClosed`, which ends the walk early.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

from summarize.errors import ChannelClosed
from summarize.file_walker.defaults import DEFAULT_STREAM_CAPACITY
from summarize.file_walker.filters import FilterSet
from summarize.file_walker.types import WalkerConfig, WalkResult
from summarize.file_walker.walker import Walker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _EndOfStream:
    """Sent once after the last item. Carries a failure raised by the source, if any."""

    failure: BaseException | None = None


class _Channel:
    """
    Single-producer, single-consumer hand-off between a worker thread and an
    event loop, backed by an `asyncio.Queue` with a fixed `maxsize`.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, capacity: int) -> None:
        self._loop = loop
        self._queue: asyncio.Queue[WalkResult | _EndOfStream] = asyncio.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self._pending: concurrent.futures.Future[None] | None = None

    def send(self, item: WalkResult | _EndOfStream) -> None:
        """Blocking send from the worker thread. Raises `ChannelClosed`."""
        with self._lock:
            if self._closed.is_set():
                raise ChannelClosed()
            try:
                pending = asyncio.run_coroutine_threadsafe(self._queue.put(item), self._loop)
            except RuntimeError as e:
                # Event loop already closed.
                raise ChannelClosed() from e
            self._pending = pending
        try:
            pending.result()
        except concurrent.futures.CancelledError as e:
            raise ChannelClosed() from e
        finally:
            with self._lock:
                self._pending = None
        if self._closed.is_set():
            raise ChannelClosed()

    async def receive(self) -> WalkResult | _EndOfStream:
        return await self._queue.get()

    def close(self) -> None:
        """Close the receiving end. Safe to call from any thread, more than once."""
        with self._lock:
            self._closed.set()
            pending = self._pending
        if pending is not None:
            pending.cancel()


def _produce(source: Iterable[WalkResult], channel: _Channel) -> None:
    # Worker thread body. Must not hold a reference to the FileStream.
    failure: BaseException | None = None
    try:
        for item in source:
            channel.send(item)
    except ChannelClosed:
        logger.debug("Consumer went away, stopping walk")
        return
    except BaseException as e:
        # KeyboardInterrupt and SystemExit included; the consumer re-raises it.
        failure = e
    try:
        channel.send(_EndOfStream(failure))
    except ChannelClosed:
        logger.debug("Consumer went away before end of stream")


class FileStream:
    """
    Asynchronous iterator over the items of a blocking source, usually a walk.

    Usage::

        async with stream(root, filters) as files:
            async for item in files:
                ...

    The worker thread starts on first iteration. Leaving the `async with` block,
    calling `aclose()`, or dropping the stream stops it.
    """

    def __init__(
        self, source: Iterable[WalkResult], capacity: int = DEFAULT_STREAM_CAPACITY
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._source = source
        self._capacity = capacity
        self._channel: _Channel | None = None
        self._thread: threading.Thread | None = None
        self._done = False

    @property
    def producer_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker thread to finish. Returns `True` if it has."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _start(self) -> _Channel:
        channel = _Channel(asyncio.get_running_loop(), self._capacity)
        self._channel = channel
        self._thread = threading.Thread(
            target=_produce, args=(self._source, channel), name="summarize-walker", daemon=True
        )
        self._thread.start()
        return channel

    def __aiter__(self) -> FileStream:
        return self

    async def __anext__(self) -> WalkResult:
        if self._done:
            raise StopAsyncIteration
        channel = self._channel if self._channel is not None else self._start()
        item = await channel.receive()
        if isinstance(item, _EndOfStream):
            self._done = True
            channel.close()
            if item.failure is not None:
                raise item.failure
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Stop the producer and discard anything still buffered."""
        self._done = True
        if self._channel is not None:
            self._channel.close()

    async def __aenter__(self) -> FileStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __del__(self) -> None:
        channel = getattr(self, "_channel", None)
        if channel is not None:
            channel.close()


def stream(
    root: str | Path,
    filters: FilterSet | None = None,
    config: WalkerConfig | None = None,
    *,
    capacity: int = DEFAULT_STREAM_CAPACITY,
) -> FileStream:
    """Walk `root` on a worker thread and stream the results asynchronously."""
    return FileStream(Walker(filters, config).walk(root), capacity=capacity)
