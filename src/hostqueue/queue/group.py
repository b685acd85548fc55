"""
Per-destination admission queue.

Bounds in-flight requests for a single group and spaces consecutive
admissions by a cooldown measured from each completion.
"""

from __future__ import annotations

import asyncio
import heapq
from dataclasses import dataclass
from typing import Any

import structlog

from hostqueue.queue.ordering import Waiter

logger = structlog.get_logger()


@dataclass
class GroupStats:
    """Group statistics."""

    total_admitted: int = 0
    total_queued: int = 0
    total_released: int = 0
    total_drained: int = 0
    peak_active: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_admitted": self.total_admitted,
            "total_queued": self.total_queued,
            "total_released": self.total_released,
            "total_drained": self.total_drained,
            "peak_active": self.peak_active,
        }


class GroupQueue:
    """
    Admission queue for one group of requests.

    Features:
    - Concurrency ceiling fixed at creation
    - Priority-first, FIFO-among-equals backlog
    - Cooldown-timed, one-in-one-out slot handoff
    - Forced drain for shutdown

    Must be used from a single event loop.

    Example:
        group = GroupQueue("api.example.com", max_concurrent=1)

        await group.enqueue(request_id, delay_ms=300)
        try:
            ...  # perform the request
        finally:
            group.finish(request_id)
    """

    def __init__(self, key: str, max_concurrent: int = 2, debug: bool = False):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")

        self.key = key
        self.max_concurrent = max_concurrent
        self.debug = debug

        # Admitted request id -> cooldown to apply when it finishes
        self._active: dict[int, int] = {}
        self._backlog: list[Waiter] = []
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._order_counter = 0
        self._stats = GroupStats()

    @property
    def active_count(self) -> int:
        """Number of requests holding a slot, cooldowns included."""
        return len(self._active)

    @property
    def pending_count(self) -> int:
        """Number of waiters in the backlog."""
        return len(self._backlog)

    def is_active(self, request_id: int) -> bool:
        """Check if a request currently holds a slot."""
        return request_id in self._active

    async def enqueue(
        self,
        request_id: int,
        delay_ms: int,
        priority: int | None = None,
    ) -> None:
        """
        Wait for a slot.

        Returns without suspending when a slot is free.

        Args:
            request_id: Id unique within the owning router
            delay_ms: Cooldown to apply when this request finishes
            priority: Smaller is more urgent; None sorts after any priority
        """
        if len(self._active) < self.max_concurrent:
            self._admit(request_id, delay_ms)
            return

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def resume() -> None:
            if not future.done():
                future.set_result(None)

        waiter = Waiter(
            id=request_id,
            resume=resume,
            order=self._order_counter,
            delay_ms=delay_ms,
            priority=priority,
        )
        self._order_counter += 1
        heapq.heappush(self._backlog, waiter)
        self._stats.total_queued += 1

        if self.debug:
            logger.info(
                "Request queued",
                group=self.key,
                request_id=request_id,
                priority=priority,
                pending=len(self._backlog),
            )

        try:
            await future
        except asyncio.CancelledError:
            if waiter.admitted:
                # Slot was handed over before the caller woke up
                self.finish(request_id)
            else:
                self._discard(waiter)
            raise

    def finish(self, request_id: int) -> None:
        """
        Mark a request as finished.

        The slot is freed after the request's cooldown, and at most one
        waiter is admitted into it.

        Args:
            request_id: An id previously admitted by enqueue
        """
        if request_id not in self._active:
            logger.warning(
                "Release of unknown request",
                group=self.key,
                request_id=request_id,
            )
            return

        if request_id in self._timers:
            logger.warning(
                "Request already released",
                group=self.key,
                request_id=request_id,
            )
            return

        delay_ms = self._active[request_id]
        loop = asyncio.get_running_loop()
        self._timers[request_id] = loop.call_later(
            delay_ms / 1000.0, self._release, request_id
        )

    def drain(self) -> int:
        """
        Resume every waiter immediately.

        Ignores the ceiling and cooldowns and leaves pending cooldown timers
        running.

        Returns:
            Number of waiters resumed
        """
        count = 0
        while self._backlog:
            waiter = heapq.heappop(self._backlog)
            waiter.resume()
            count += 1

        self._stats.total_drained += count
        if count:
            logger.info("Drained group", group=self.key, resumed=count)
        return count

    def cancel_cooldowns(self) -> int:
        """
        Cancel pending cooldown timers, dropping their requests.

        Returns:
            Number of timers cancelled
        """
        count = len(self._timers)
        for request_id, handle in self._timers.items():
            handle.cancel()
            self._active.pop(request_id, None)
        self._timers.clear()
        return count

    def get_stats(self) -> dict[str, Any]:
        """Get group statistics."""
        return {
            "group": self.key,
            "max_concurrent": self.max_concurrent,
            "active": len(self._active),
            "pending": len(self._backlog),
            "cooling_down": len(self._timers),
            **self._stats.to_dict(),
        }

    def _admit(self, request_id: int, delay_ms: int) -> None:
        self._active[request_id] = delay_ms
        self._stats.total_admitted += 1
        self._stats.peak_active = max(self._stats.peak_active, len(self._active))

        if self.debug:
            logger.info(
                "Request admitted",
                group=self.key,
                request_id=request_id,
                active=len(self._active),
                pending=len(self._backlog),
            )

    def _release(self, request_id: int) -> None:
        """Cooldown expiry: free the slot and hand it to the next waiter."""
        self._timers.pop(request_id, None)
        if self._active.pop(request_id, None) is None:
            return
        self._stats.total_released += 1

        if self.debug:
            logger.info("Request released", group=self.key, request_id=request_id)

        if len(self._active) < self.max_concurrent and self._backlog:
            waiter = heapq.heappop(self._backlog)
            self._admit(waiter.id, waiter.delay_ms)
            waiter.admitted = True
            waiter.resume()

    def _discard(self, waiter: Waiter) -> None:
        """Drop a cancelled waiter from the backlog."""
        try:
            self._backlog.remove(waiter)
        except ValueError:
            # Already popped by a drain
            return
        heapq.heapify(self._backlog)
