"""Tests for the epoch-caching wrappers."""

import copy
import threading

import numpy as np
import pytest
from scipy import stats

from uncertain import Cached, Distribution, PointMass, Shared, Uncertain
from uncertain.core.cache import CacheSlot, LockedCacheSlot, query_scope, reset_caches


class EpochIs(Uncertain):
    """Boolean node that is true at a single epoch."""

    def __init__(self, epoch):
        self.epoch = epoch

    def sample(self, rng, epoch):
        return epoch == self.epoch


class CountingDraw:
    """Variate generator counting its draws."""

    def __init__(self):
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, rng):
        with self._lock:
            self.calls += 1
        return rng.normal()


@pytest.fixture
def rng():
    return np.random.default_rng(0xA02BDBF7BB3C0A7)


class TestCacheSlot:
    """Tests for the single (epoch, value) slot."""

    def test_empty_slot_draws(self):
        slot = CacheSlot()
        assert slot.peek() is None
        assert slot.get_or_fill(0, lambda: "a") == "a"
        assert slot.peek() == (0, "a")

    def test_same_epoch_reuses_value(self):
        slot = CacheSlot()
        slot.get_or_fill(3, lambda: "a")
        assert slot.get_or_fill(3, lambda: "b") == "a"

    def test_new_epoch_overwrites(self):
        slot = CacheSlot()
        slot.get_or_fill(3, lambda: "a")
        assert slot.get_or_fill(4, lambda: "b") == "b"
        assert slot.peek() == (4, "b")

    def test_cached_none_is_a_value(self):
        slot = CacheSlot()
        slot.get_or_fill(0, lambda: None)
        assert slot.get_or_fill(0, lambda: "other") is None

    def test_clear(self):
        slot = CacheSlot()
        slot.get_or_fill(0, lambda: 1)
        slot.clear()
        assert slot.peek() is None
        assert slot.get_or_fill(0, lambda: 2) == 2

    def test_value_is_scoped_to_its_query(self):
        slot = CacheSlot()
        with query_scope():
            slot.get_or_fill(0, lambda: "first")
            assert slot.get_or_fill(0, lambda: "again") == "first"
        with query_scope():
            assert slot.get_or_fill(0, lambda: "second") == "second"
        assert slot.get_or_fill(0, lambda: "outside") == "outside"

    def test_query_scopes_get_distinct_tokens(self):
        with query_scope() as first:
            pass
        with query_scope() as second:
            pass
        assert first != second


class TestCached:
    """Tests for the reference-caching wrapper."""

    def test_same_epoch_same_value(self, rng):
        x = Distribution(stats.norm(10.0, 1.0)).into_cached()
        for epoch in range(1000):
            assert x.sample(rng, epoch) == x.sample(rng, epoch)

    def test_same_epoch_despite_intervening_draws(self, rng):
        draw = CountingDraw()
        x = Cached(Distribution(draw))
        first = x.sample(rng, 7)
        rng.random(size=13)
        assert x.sample(rng, 7) == first
        assert draw.calls == 1

    def test_new_epoch_draws_again(self, rng):
        draw = CountingDraw()
        x = Cached(Distribution(draw))
        values = [x.sample(rng, epoch) for epoch in range(50)]
        assert draw.calls == 50
        assert len(set(values)) == 50

    def test_self_difference_is_zero(self, rng):
        x = Distribution(stats.norm(5.0, 2.0)).into_cached()
        for epoch in range(100):
            assert (x - x).sample(rng, epoch) == 0.0

    def test_uncached_self_difference_is_not_zero(self, rng):
        x = Distribution(stats.norm(5.0, 2.0))
        assert any((x - x).sample(rng, epoch) != 0.0 for epoch in range(10))

    def test_self_difference_expectation(self):
        x = Distribution(stats.norm(5.0, 2.0)).into_cached()
        assert (x - x).expect(0.01) == 0.0
        assert (x - x).eq(0.0).pr(0.9999)

    def test_binomial_self_difference(self):
        x = Distribution(stats.binom(100, 0.5)).into_cached()
        assert (x - x).map(lambda d: d == 0).pr(0.9999)

    def test_reset(self, rng):
        draw = CountingDraw()
        x = Cached(Distribution(draw))
        x.sample(rng, 0)
        x.reset()
        x.sample(rng, 0)
        assert draw.calls == 2


class TestShared:
    """Tests for the shared, type-erased wrapper."""

    def test_clones_share_values(self, rng):
        x = Distribution(stats.norm(10.0, 1.0)).into_shared()
        y = x.clone()
        for epoch in range(1000):
            assert x.sample(rng, epoch) == y.sample(rng, epoch)

    def test_clone_is_a_new_handle(self):
        x = PointMass(1.0).into_shared()
        y = x.clone()
        z = copy.copy(x)
        assert y is not x and z is not x
        assert x.shares_cache_with(y)
        assert x.shares_cache_with(z)

    def test_clones_draw_once_per_epoch(self, rng):
        draw = CountingDraw()
        x = Shared(Distribution(draw))
        handles = [x.clone() for _ in range(5)]
        for epoch in range(10):
            values = {h.sample(rng, epoch) for h in handles}
            assert len(values) == 1
        assert draw.calls == 10

    def test_independent_wrappers_do_not_share(self, rng):
        leaf = Distribution(stats.norm(0.0, 1.0))
        a, b = Shared(leaf), Shared(leaf)
        assert not a.shares_cache_with(b)
        assert a.sample(rng, 0) != b.sample(rng, 0)

    def test_wrapping_shared_reuses_cell(self):
        x = PointMass(1.0).into_shared()
        assert Shared(x).shares_cache_with(x)

    def test_wrapping_shared_cannot_add_a_lock(self):
        x = PointMass(1.0).into_shared()
        with pytest.raises(ValueError, match="thread-safe"):
            Shared(x, thread_safe=True)
        with pytest.raises(ValueError):
            x.into_shared(thread_safe=True)

    def test_wrapping_locked_shared_keeps_lock(self):
        x = PointMass(1.0).into_shared(thread_safe=True)
        y = Shared(x, thread_safe=True)
        assert y.shares_cache_with(x)
        assert isinstance(y._cell.slot, LockedCacheSlot)

    def test_reset_applies_to_all_clones(self, rng):
        draw = CountingDraw()
        x = Shared(Distribution(draw))
        y = x.clone()
        x.sample(rng, 0)
        y.reset()
        x.sample(rng, 0)
        assert draw.calls == 2

    def test_shared_in_sum_with_itself(self):
        x = Distribution(stats.norm(5.0, 2.0)).into_shared()
        doubled = x + x.clone()
        assert doubled.join(x.mul(2.0), lambda a, b: a == b).pr(0.999)


class TestResetCaches:
    """Tests for clearing caches reachable from a node."""

    def test_reset_caches_counts_wrappers(self):
        x = PointMass(1.0).into_cached()
        y = PointMass(2.0).into_shared()
        assert reset_caches((x + y) * x) == 2

    def test_cached_values_do_not_leak_across_queries(self):
        x = Distribution(lambda rng: 1.0).into_cached()
        x.slot.get_or_fill(0, lambda: 100.0)
        assert x.expect(0.1) == 1.0

    def test_flat_map_branch_does_not_leak_across_queries(self):
        state = {"value": 0.0}
        x = Distribution(lambda rng: state["value"]).into_shared()
        y = EpochIs(9).flat_map(lambda hit: x if hit else PointMass(0.0))
        assert reset_caches(y) == 0

        assert y.expect(1.0) == 0.0
        assert x._cell.slot.peek() == (9, 0.0)
        state["value"] = 5.0
        assert y.expect(1.0) == pytest.approx(0.5)

    def test_flat_map_cached_branch_draws_again_in_next_query(self):
        draw = CountingDraw()
        x = Cached(Distribution(draw))
        y = EpochIs(9).flat_map(lambda hit: x if hit else PointMass(0.0))
        y.expect(10.0)
        y.expect(10.0)
        assert draw.calls == 2

    def test_repeated_queries_are_deterministic(self):
        x = Distribution(stats.norm(3.0, 1.0)).into_shared()
        expr = x * x.clone() + Distribution(stats.norm(0.0, 1.0))
        assert expr.expect(0.5) == expr.expect(0.5)


class TestThreadSafety:
    """Tests for the lock-guarded slot."""

    def test_locked_slot_is_a_cache_slot(self):
        slot = LockedCacheSlot()
        assert isinstance(slot, CacheSlot)
        assert slot.get_or_fill(1, lambda: "a") == "a"
        assert slot.get_or_fill(1, lambda: "b") == "a"

    def test_thread_safe_wrappers_use_locked_slot(self):
        assert isinstance(PointMass(1).into_cached(thread_safe=True).slot, LockedCacheSlot)
        assert isinstance(
            PointMass(1).into_shared(thread_safe=True)._cell.slot, LockedCacheSlot
        )

    def test_concurrent_sampling_draws_once_per_epoch(self):
        draw = CountingDraw()
        x = Shared(Distribution(draw), thread_safe=True)
        barrier = threading.Barrier(8)
        results = []
        results_lock = threading.Lock()

        def worker(seed):
            local_rng = np.random.default_rng(seed)
            handle = x.clone()
            barrier.wait()
            values = [handle.sample(local_rng, 0) for _ in range(50)]
            with results_lock:
                results.extend(values)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert draw.calls == 1
        assert len(set(results)) == 1
