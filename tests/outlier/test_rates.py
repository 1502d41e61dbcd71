"""
Tests for the per-group rate estimators.
"""

import math
import threading

import pytest

from src.outlier.rates import ExponentialMovingAverage, SlidingWindowRate


class TestSlidingWindowRate:
    """Tests for the windowed actual rate."""

    def test_empty_window_is_zero(self, clock):
        window = SlidingWindowRate(clock=clock)

        assert window.rate() == 0.0

    def test_counts_events_in_window(self, clock):
        window = SlidingWindowRate(clock=clock)
        window.observe(3)
        clock.advance(0.5)
        window.observe(2)

        assert window.count() == 5
        assert window.rate() == 5.0

    def test_unit_marks_equal_one_bulk_mark(self, clock):
        """k unit marks and one mark of k produce the same rate."""
        units = SlidingWindowRate(clock=clock)
        bulk = SlidingWindowRate(clock=clock)

        for _ in range(37):
            units.observe()
        bulk.observe(37)

        assert units.rate() == bulk.rate() == 37.0

    def test_events_expire_after_window(self, clock):
        window = SlidingWindowRate(clock=clock)
        window.observe(10)
        clock.advance(0.6)
        window.observe(5)

        clock.advance(0.4)  # first batch is now exactly one window old

        assert window.count() == 5

        clock.advance(0.7)

        assert window.rate() == 0.0

    def test_rate_is_normalized_to_seconds(self, clock):
        window = SlidingWindowRate(window_seconds=2.0, clock=clock)
        window.observe(10)

        assert window.count() == 10
        assert window.rate() == 5.0

    @pytest.mark.parametrize("n", [0, -5])
    def test_rejects_non_positive_counts(self, clock, n):
        window = SlidingWindowRate(clock=clock)

        with pytest.raises(ValueError):
            window.observe(n)

    @pytest.mark.parametrize("window", [0, float("nan")])
    def test_rejects_non_positive_window(self, window):
        with pytest.raises(ValueError):
            SlidingWindowRate(window_seconds=window)

    def test_concurrent_observations_are_not_lost(self, clock):
        window = SlidingWindowRate(clock=clock)
        threads = 8
        per_thread = 1000
        barrier = threading.Barrier(threads)

        def produce():
            barrier.wait()
            for _ in range(per_thread):
                window.observe()

        workers = [threading.Thread(target=produce) for _ in range(threads)]
        for w in workers:
            w.start()
        for w in workers:
            w.join()

        assert window.count() == threads * per_thread


class TestExponentialMovingAverage:
    """Tests for the decayed average rate."""

    def test_alpha_for_one_minute_window(self, clock):
        ema = ExponentialMovingAverage(clock=clock)

        assert ema.alpha == pytest.approx(1 - math.exp(-5 / 60))

    def test_seeded_from_zero(self, clock):
        ema = ExponentialMovingAverage(clock=clock)
        ema.observe(100)

        assert ema.rate() == 0.0

    def test_first_tick_folds_pending_events(self, clock):
        ema = ExponentialMovingAverage(clock=clock)
        ema.observe(300)

        clock.advance(5.0)

        # 300 events over a 5 s tick is 60 events/sec
        assert ema.rate() == pytest.approx(ema.alpha * 60)

    def test_decays_without_events(self, clock):
        ema = ExponentialMovingAverage(clock=clock)
        ema.observe(300)
        clock.advance(5.0)
        first = ema.rate()

        clock.advance(5.0)

        assert ema.rate() == pytest.approx(first * (1 - ema.alpha))
        assert ema.rate() >= 0.0

    def test_converges_to_steady_rate(self, clock):
        ema = ExponentialMovingAverage(clock=clock)
        for _ in range(200):
            ema.observe(50)  # 10 events/sec
            clock.advance(5.0)

        assert ema.rate() == pytest.approx(10.0, rel=1e-3)

    def test_long_idle_matches_tick_by_tick(self, clock):
        """Collapsing many idle ticks gives the same rate as ticking one at a time."""
        stepped = ExponentialMovingAverage(clock=clock)
        collapsed = ExponentialMovingAverage(clock=clock)
        stepped.observe(600)
        collapsed.observe(600)

        for _ in range(30):
            clock.advance(5.0)
            stepped.rate()

        assert collapsed.rate() == pytest.approx(stepped.rate())

    def test_partial_tick_does_not_advance(self, clock):
        ema = ExponentialMovingAverage(clock=clock)
        ema.observe(300)
        clock.advance(4.9)

        assert ema.rate() == 0.0

        clock.advance(0.2)

        assert ema.rate() > 0.0

    def test_events_after_tick_boundary_count_towards_next_tick(self, clock):
        ema = ExponentialMovingAverage(clock=clock)
        clock.advance(5.0)
        ema.observe(300)  # lands after the first boundary, so the first tick is empty

        assert ema.rate() == 0.0

        clock.advance(5.0)

        assert ema.rate() == pytest.approx(ema.alpha * 60)

    @pytest.mark.parametrize("n", [0, -1])
    def test_rejects_non_positive_counts(self, clock, n):
        ema = ExponentialMovingAverage(clock=clock)

        with pytest.raises(ValueError):
            ema.observe(n)

    @pytest.mark.parametrize("window,tick", [(0, 5), (60, 0), (-1, 5), (float("nan"), 5)])
    def test_rejects_invalid_configuration(self, window, tick):
        with pytest.raises(ValueError):
            ExponentialMovingAverage(window_seconds=window, tick_seconds=tick)
