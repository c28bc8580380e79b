import pytest

from modeldedup.lazycache import LazyCache, ReclaimPool, Slot


class Counter(object):
    def __init__(self):
        self.calls = 0

    def __call__(self, key):
        self.calls += 1
        return [key] * 3


def test_same_reference_while_held():
    cache = LazyCache()
    compute = Counter()
    first = cache.get('a', compute)
    for _ in range(5):
        assert cache.get('a', compute) is first
    assert compute.calls == 1
    assert 'a' in cache
    assert cache['a'] is first


def test_recompute_after_reclaim():
    cache = LazyCache()
    compute = Counter()
    first = cache.get('a', compute)
    cache.slot('a').clear()

    assert 'a' not in cache
    with pytest.raises(KeyError):
        cache['a']

    second = cache.get('a', compute)
    assert second == first
    assert second is not first
    assert compute.calls == 2


def test_none_is_a_value():
    cache = LazyCache()
    calls = []

    def compute(key):
        calls.append(key)
        return None

    assert cache.get('k', compute) is None
    assert cache.get('k', compute) is None
    assert calls == ['k']


def test_pool_evicts_least_recently_used():
    pool = ReclaimPool(capacity=2)
    cache = LazyCache(pool)
    compute = Counter()
    cache.get('a', compute)
    cache.get('b', compute)
    cache.get('a', compute)
    cache.get('c', compute)

    assert 'a' in cache
    assert 'b' not in cache
    assert 'c' in cache
    assert len(pool) == 2
    assert len(cache) == 2


def test_pool_reclaim():
    pool = ReclaimPool()
    cache = LazyCache(pool)
    compute = Counter()
    for key in 'abc':
        cache.get(key, compute)

    pool.reclaim(1)
    assert 'a' not in cache
    assert 'b' in cache

    pool.reclaim()
    assert len(cache) == 0
    cache.get('b', compute)
    assert compute.calls == 4


def test_skip_cache_always_computes():
    cache = LazyCache(skip_cache=True)
    compute = Counter()
    cache.get('a', compute)
    cache.get('a', compute)
    cache['a'] = 1
    assert compute.calls == 2
    assert 'a' not in cache


def test_dict_interface():
    cache = LazyCache()
    cache['a'] = 1
    assert cache['a'] == 1
    del cache['a']
    assert 'a' not in cache
    cache['b'] = 2
    cache.clear()
    assert len(cache) == 0


def test_slot():
    s = Slot()
    assert not s
    assert s.get() is None
    assert s.get('default') == 'default'
    s.set(0)
    assert s
    assert s.get() == 0
    s.clear()
    assert not s


def test_evicted_keys_are_forgotten():
    pool = ReclaimPool(capacity=4)
    cache = LazyCache(pool)
    compute = Counter()
    for n in range(100):
        cache.get(n, compute)

    assert len(pool) == 4
    assert len(cache._slots) == 4
    assert len(cache) == 4


def test_cleared_slots_leave_the_pool():
    pool = ReclaimPool(capacity=10)
    cache = LazyCache(pool)
    compute = Counter()
    for key in 'abc':
        cache.get(key, compute)
    assert len(pool) == 3

    cache.slot('a').clear()
    assert len(pool) == 2
    assert 'a' not in cache._slots

    del cache['b']
    assert len(pool) == 1

    cache.clear()
    assert len(pool) == 0
    assert cache._slots == {}


def test_stale_slot_does_not_drop_new_entry():
    cache = LazyCache()
    stale = cache.slot('a')
    del cache['a']
    cache['a'] = 1

    stale.clear()
    assert cache['a'] == 1
