"""Collect push-style debugger results into a single awaitable value.

The IDE hands out stack frames and variable children through callbacks:
zero or more batches, each flagged as the last one or not, an error instead,
or nothing at all when evaluation hangs. ``ResultCollector`` accumulates
those callbacks under a lock and resolves exactly once, on whichever comes
first:

* the last batch has arrived and no per-item enrichment is outstanding,
* the item cap is reached (extra items are dropped),
* the producer reports an error (accumulated items are kept),
* the caller's wait times out (accumulated items are returned).

After resolution every callback is a no-op and ``is_obsolete()`` returns
True so producers can stop pushing work.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CollectedResult(Generic[T]):
    """Outcome of one collection.

    ``remaining`` counts children the IDE held back for a later page.
    """
    items: list[T] = field(default_factory=list)
    complete: bool = False
    error_message: str | None = None
    timed_out: bool = False
    remaining: int = 0


class ResultCollector(Generic[T]):
    """Single-resolution bridge from producer callbacks to ``await``.

    Must be created from a coroutine (it binds to the running loop); the
    producer hooks may be called from any thread.
    """

    def __init__(self, limit: int | None = None, loop: asyncio.AbstractEventLoop | None = None):
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self._limit = limit
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[CollectedResult[T]] = self._loop.create_future()
        self._lock = threading.Lock()
        self._items: list[T] = []
        self._pending = 0
        self._last_batch_seen = False
        self._error_message: str | None = None
        self._outcome: CollectedResult[T] | None = None

        if limit == 0:
            with self._lock:
                self._resolve_locked(complete=True)

    @property
    def resolved(self) -> bool:
        with self._lock:
            return self._outcome is not None

    def is_obsolete(self) -> bool:
        """Producers may poll this to stop work once the result is settled."""
        return self.resolved

    # Producer hooks

    def add_batch(self, items: Iterable[T], last: bool = False) -> None:
        """Append a batch of ready items."""
        with self._lock:
            if self._outcome is not None:
                return
            self._items.extend(items)
            if last:
                self._last_batch_seen = True
            self._check_locked()

    def expect(self, count: int, last: bool = False) -> None:
        """Announce ``count`` items that will arrive later through ``deliver``."""
        with self._lock:
            if self._outcome is not None:
                return
            self._pending += count
            if last:
                self._last_batch_seen = True
            self._check_locked()

    def deliver(self, item: T) -> None:
        """Append one item previously announced with ``expect``."""
        with self._lock:
            if self._outcome is not None:
                return
            self._items.append(item)
            self._pending -= 1
            self._check_locked()

    def fail(self, message: str) -> None:
        """Stop collecting; whatever arrived so far becomes the result."""
        with self._lock:
            if self._outcome is not None:
                return
            logger.debug(f"Producer reported error after {len(self._items)} items: {message}")
            self._error_message = message
            self._resolve_locked(complete=False)

    # Consumer side

    async def wait(self, timeout: float) -> CollectedResult[T]:
        """Wait up to ``timeout`` seconds for the result.

        Never raises on timeout: the collection is closed and the items
        accumulated so far are returned with ``timed_out`` set.
        """
        try:
            return await asyncio.wait_for(asyncio.shield(self._future), timeout=timeout)
        except asyncio.TimeoutError:
            with self._lock:
                if self._outcome is None:
                    logger.debug(
                        f"Collection timed out after {timeout}s with {len(self._items)} items"
                    )
                    self._outcome = CollectedResult(
                        items=list(self._items),
                        complete=False,
                        error_message=self._error_message,
                        timed_out=True,
                    )
                return self._outcome

    def _check_locked(self) -> None:
        if self._limit is not None and len(self._items) >= self._limit:
            del self._items[self._limit:]
            self._resolve_locked(complete=True)
        elif self._last_batch_seen and self._pending <= 0:
            self._resolve_locked(complete=True)

    def _resolve_locked(self, complete: bool) -> None:
        self._outcome = CollectedResult(
            items=list(self._items),
            complete=complete,
            error_message=self._error_message,
        )
        try:
            self._loop.call_soon_threadsafe(self._set_future, self._outcome)
        except RuntimeError:
            # Loop already closed; nobody is waiting any more.
            logger.debug("Collection resolved after its event loop closed")

    def _set_future(self, outcome: CollectedResult[T]) -> None:
        if not self._future.done():
            self._future.set_result(outcome)
