"""
Waiter records and their admission order.

Explicit priorities always go first (smaller is more urgent). Waiters
without a priority follow in arrival order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass(eq=False)
class Waiter:
    """A caller suspended until its group has a free slot."""

    id: int
    resume: Callable[[], None] = field(repr=False)
    order: int
    delay_ms: int
    priority: int | None = None
    admitted: bool = False

    def __lt__(self, other: "Waiter") -> bool:
        return compare_waiters(self, other) < 0


def compare_waiters(a: Waiter, b: Waiter) -> int:
    """
    Three-way comparison of two waiters.

    Returns:
        Negative if a is admitted first, positive if b is, 0 only for the
        same waiter.
    """
    if a.priority is not None and b.priority is not None:
        if a.priority != b.priority:
            return -1 if a.priority < b.priority else 1
    elif a.priority is not None:
        return -1
    elif b.priority is not None:
        return 1

    # order is unique per group, so this is a total order
    return (a.order > b.order) - (a.order < b.order)
