"""
Routing of admissions to per-group queues.

The router owns the group map and the id counter shared by every group,
so request ids stay unique across destinations.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from types import MappingProxyType
from typing import Any, AsyncIterator, Mapping

import structlog

from hostqueue.core.models import QueueOptions, RequestOptions
from hostqueue.queue.group import GroupQueue

logger = structlog.get_logger()


class QueueRouter:
    """
    Per-destination admission scheduler.

    Groups are created lazily on first use of their key and live as long
    as the router.

    Example:
        router = QueueRouter(QueueOptions(max_concurrent=1, delay_ms=100))

        async with router.slot("api.example.com"):
            response = await client.get("https://api.example.com/items")

        router.teardown()
    """

    def __init__(self, options: QueueOptions | None = None):
        self.options = options or QueueOptions()

        self._groups: dict[str, GroupQueue] = {}
        self._counter = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether teardown has run."""
        return self._closed

    @property
    def groups(self) -> Mapping[str, GroupQueue]:
        """Read-only view of the managed groups."""
        return MappingProxyType(self._groups)

    def get_group(self, group_key: str) -> GroupQueue | None:
        """Get the queue for a group, if it exists."""
        return self._groups.get(group_key)

    def _get_or_create_group(
        self, group_key: str, max_concurrent: int | None
    ) -> GroupQueue:
        group = self._groups.get(group_key)
        if group is None:
            group = GroupQueue(
                group_key,
                max_concurrent=max_concurrent or self.options.max_concurrent,
                debug=self.options.debug,
            )
            self._groups[group_key] = group
            logger.debug(
                "Created group",
                group=group_key,
                max_concurrent=group.max_concurrent,
            )
        elif max_concurrent is not None and max_concurrent != group.max_concurrent:
            logger.debug(
                "Ignoring max_concurrent override for existing group",
                group=group_key,
                requested=max_concurrent,
                current=group.max_concurrent,
            )
        return group

    def _next_id(self) -> int:
        request_id = self._counter
        self._counter += 1
        return request_id

    async def admit(
        self,
        group_key: str,
        options: RequestOptions | None = None,
    ) -> int:
        """
        Wait until a request to this group may start.

        Args:
            group_key: Resolved group key, e.g. the destination host
            options: Per-request priority and cooldown overrides

        Returns:
            The request id to pass to release()
        """
        options = options or RequestOptions()
        request_id = self._next_id()

        if self._closed:
            logger.warning(
                "Admission after teardown, not queued",
                group=group_key,
                request_id=request_id,
            )
            return request_id

        group = self._get_or_create_group(group_key, options.max_concurrent)
        delay_ms = (
            options.delay_ms if options.delay_ms is not None else self.options.delay_ms
        )
        await group.enqueue(request_id, delay_ms, options.priority)
        return request_id

    def release(self, group_key: str, request_id: int) -> None:
        """
        Report that an admitted request has completed, successfully or not.

        Args:
            group_key: The key the request was admitted under
            request_id: Id returned by admit()
        """
        if self._closed:
            return

        group = self._groups.get(group_key)
        if group is None:
            logger.warning(
                "Release for unknown group",
                group=group_key,
                request_id=request_id,
            )
            return

        group.finish(request_id)

    @asynccontextmanager
    async def slot(
        self,
        group_key: str,
        options: RequestOptions | None = None,
    ) -> AsyncIterator[int]:
        """Hold a slot for the duration of the block, releasing on any exit."""
        request_id = await self.admit(group_key, options)
        try:
            yield request_id
        finally:
            self.release(group_key, request_id)

    def teardown(self, cancel_cooldowns: bool = False) -> int:
        """
        Resume every queued waiter and stop queuing.

        Args:
            cancel_cooldowns: Also cancel cooldown timers still pending

        Returns:
            Number of waiters resumed
        """
        if self._closed:
            logger.warning("Router already torn down")
            return 0

        drained = 0
        for group in self._groups.values():
            drained += group.drain()
            if cancel_cooldowns:
                group.cancel_cooldowns()

        self._closed = True
        logger.info("Router torn down", groups=len(self._groups), drained=drained)
        return drained

    def get_stats(self) -> dict[str, dict[str, Any]]:
        """Get statistics for every group."""
        return {key: group.get_stats() for key, group in self._groups.items()}
