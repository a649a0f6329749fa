"""Unit tests for the bounded concurrency pool."""

import asyncio

import pytest

from feed_aggregator.core.pool import ConcurrencyPool, TaskOutcome


class Tracker:
    """Worker that records how many calls overlap."""

    def __init__(self):
        self.in_flight = 0
        self.peak = 0
        self.started = []

    async def __call__(self, item):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        self.started.append(item)
        try:
            # Uneven durations so slots free up out of order
            await asyncio.sleep(0.001 * ((item * 7) % 5))
            return item * 10
        finally:
            self.in_flight -= 1


class TestConcurrencyPool:
    """Tests for ConcurrencyPool."""

    def test_rejects_limit_below_one(self):
        with pytest.raises(ValueError):
            ConcurrencyPool(0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,count", [(1, 5), (3, 20), (6, 6), (8, 3)])
    async def test_never_exceeds_limit(self, limit, count):
        tracker = Tracker()
        pool = ConcurrencyPool(limit)

        outcomes = await pool.run(list(range(count)), tracker)

        assert tracker.peak <= limit
        assert pool.peak_in_flight <= limit
        assert tracker.peak == min(limit, count)
        assert len(outcomes) == count

    @pytest.mark.asyncio
    async def test_outcomes_in_item_order(self):
        outcomes = await ConcurrencyPool(3).run(list(range(10)), Tracker())

        assert [o.index for o in outcomes] == list(range(10))
        assert [o.result for o in outcomes] == [i * 10 for i in range(10)]
        assert all(o.ok for o in outcomes)

    @pytest.mark.asyncio
    async def test_items_admitted_in_order(self):
        tracker = Tracker()

        await ConcurrencyPool(1).run(["a", "b", "c"], self._echo(tracker))

        assert tracker.started == ["a", "b", "c"]

    @staticmethod
    def _echo(tracker):
        async def worker(item):
            tracker.started.append(item)
            await asyncio.sleep(0)
            return item

        return worker

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(self):
        """A failing task is recorded; the others still finish."""
        finished = []

        async def worker(item):
            await asyncio.sleep(0.001 * item)
            if item == 1:
                raise RuntimeError("boom")
            finished.append(item)
            return item

        outcomes = await ConcurrencyPool(2).run([0, 1, 2, 3], worker)

        assert sorted(finished) == [0, 2, 3]
        assert outcomes[1].ok is False
        assert isinstance(outcomes[1].error, RuntimeError)
        assert [o.result for o in outcomes if o.ok] == [0, 2, 3]

    @pytest.mark.asyncio
    async def test_all_failures_settle(self):
        async def worker(item):
            raise ValueError(item)

        outcomes = await ConcurrencyPool(4).run([1, 2, 3], worker)

        assert all(not o.ok for o in outcomes)

    @pytest.mark.asyncio
    async def test_empty_items(self):
        pool = ConcurrencyPool(2)

        assert await pool.run([], Tracker()) == []
        assert pool.peak_in_flight == 0

    def test_task_outcome_ok(self):
        assert TaskOutcome(index=0, item="x", result=1).ok is True
        assert TaskOutcome(index=0, item="x", error=RuntimeError()).ok is False
