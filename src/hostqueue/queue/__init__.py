"""
Admission queues.

Provides per-destination concurrency limits, cooldowns and priority ordering.
"""

from hostqueue.queue.group import GroupQueue, GroupStats
from hostqueue.queue.ordering import Waiter, compare_waiters
from hostqueue.queue.router import QueueRouter

__all__ = [
    "GroupQueue",
    "GroupStats",
    "QueueRouter",
    "Waiter",
    "compare_waiters",
]
