"""Unit tests for SimTimedQueue."""

import pytest

from pulpit.utils.timing import SimTimedQueue


class TestSimTimedQueue:
    """Test suite for SimTimedQueue class."""

    @pytest.fixture
    def queue(self) -> SimTimedQueue:
        """Create a fresh SimTimedQueue for each test."""
        return SimTimedQueue()

    def test_put_and_pop_due(self, queue: SimTimedQueue) -> None:
        assert queue.put_at(1.0, "a", "item_a")

        assert queue.pop_due(0.5) == []
        assert queue.pop_due(1.0) == ["item_a"]
        assert queue.empty()

    def test_duplicate_key_rejected(self, queue: SimTimedQueue) -> None:
        assert queue.put_at(1.0, "a", "first")
        assert not queue.put_at(0.5, "a", "second")

        assert queue.get("a") == "first"
        assert queue.qsize() == 1

    def test_key_reusable_after_release(self, queue: SimTimedQueue) -> None:
        queue.put_at(1.0, "a", "first")
        queue.pop_due(1.0)

        assert queue.put_at(2.0, "a", "second")

    def test_release_order(self, queue: SimTimedQueue) -> None:
        """Earlier due time first; equal due times in insertion order."""
        queue.put_at(2.0, "late", "late")
        queue.put_at(1.0, "first", "first")
        queue.put_at(1.0, "second", "second")

        assert queue.pop_due(5.0) == ["first", "second", "late"]

    def test_cancel(self, queue: SimTimedQueue) -> None:
        queue.put_at(1.0, "a", "item_a")

        assert queue.cancel("a") is True
        assert queue.cancel("a") is False
        assert "a" not in queue
        assert queue.pop_due(10.0) == []

    def test_cancel_then_reschedule(self, queue: SimTimedQueue) -> None:
        queue.put_at(1.0, "a", "old")
        queue.cancel("a")
        queue.put_at(3.0, "a", "new")

        assert queue.pop_due(2.0) == []
        assert queue.pop_due(3.0) == ["new"]

    def test_clear(self, queue: SimTimedQueue) -> None:
        for i in range(3):
            queue.put_at(float(i), i, i)

        assert queue.clear() == 3
        assert queue.empty()
        assert queue.pop_due(100.0) == []

    def test_items_sorted_by_due_time(self, queue: SimTimedQueue) -> None:
        queue.put_at(3.0, "c", "c")
        queue.put_at(1.0, "a", "a")
        queue.put_at(2.0, "b", "b")

        assert queue.items() == ["a", "b", "c"]

    def test_peek_next_due_time_skips_cancelled(self, queue: SimTimedQueue) -> None:
        assert queue.peek_next_due_time() is None

        queue.put_at(1.0, "a", "a")
        queue.put_at(2.0, "b", "b")
        queue.cancel("a")

        assert queue.peek_next_due_time() == 2.0
