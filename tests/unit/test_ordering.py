"""Tests for waiter ordering."""

import heapq

from hostqueue.queue.ordering import Waiter, compare_waiters


def make_waiter(order: int, priority: int | None = None) -> Waiter:
    return Waiter(id=order, resume=lambda: None, order=order, delay_ms=0, priority=priority)


class TestCompareWaiters:
    """Tests for the three-way comparator."""

    def test_lower_priority_value_first(self):
        assert compare_waiters(make_waiter(0, 2), make_waiter(1, 1)) > 0
        assert compare_waiters(make_waiter(0, -5), make_waiter(1, 0)) < 0

    def test_priority_beats_no_priority(self):
        early = make_waiter(0)
        late_with_priority = make_waiter(5, 100)
        assert compare_waiters(late_with_priority, early) < 0
        assert compare_waiters(early, late_with_priority) > 0

    def test_no_priority_uses_arrival(self):
        assert compare_waiters(make_waiter(0), make_waiter(1)) < 0
        assert compare_waiters(make_waiter(3), make_waiter(1)) > 0

    def test_equal_priority_uses_arrival(self):
        assert compare_waiters(make_waiter(0, 1), make_waiter(1, 1)) < 0
        assert compare_waiters(make_waiter(2, 1), make_waiter(1, 1)) > 0

    def test_same_waiter_is_equal(self):
        waiter = make_waiter(0, 3)
        assert compare_waiters(waiter, waiter) == 0


class TestHeapOrder:
    """Tests for ordering inside a heap."""

    def test_pop_order(self):
        waiters = [
            make_waiter(0),
            make_waiter(1, 3),
            make_waiter(2),
            make_waiter(3, 1),
            make_waiter(4, 3),
        ]
        heap: list[Waiter] = []
        for waiter in waiters:
            heapq.heappush(heap, waiter)

        popped = [heapq.heappop(heap).order for _ in range(len(waiters))]
        assert popped == [3, 1, 4, 0, 2]
