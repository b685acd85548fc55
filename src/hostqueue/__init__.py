"""
hostqueue - Per-host admission control for outbound requests

Bounds concurrent requests per destination, spaces them with a cooldown,
and admits waiters by priority, then arrival order.
"""

__version__ = "1.0.0"

from hostqueue.core.models import QueueOptions, RequestOptions
from hostqueue.queue.group import GroupQueue
from hostqueue.queue.router import QueueRouter
from hostqueue.transport.queued import QueuedTransport, create_client, resolve_group_key

__all__ = [
    "QueueOptions",
    "RequestOptions",
    "GroupQueue",
    "QueueRouter",
    "QueuedTransport",
    "create_client",
    "resolve_group_key",
]
