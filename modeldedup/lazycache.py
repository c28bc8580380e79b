import threading
from collections import OrderedDict


_EMPTY = object()


class Slot(object):
    """
    Holds one value which may be dropped at any time by whoever manages
    memory. Callers must check for presence on every read.
    """
    __slots__ = ('_value', '_pool', '_owner', '_key')

    def __init__(self, pool=None, owner=None, key=None):
        self._value = _EMPTY
        self._pool = pool
        self._owner = owner
        self._key = key

    def get(self, default=None):
        value = self._value
        if value is _EMPTY:
            return default
        if self._pool is not None:
            self._pool.touch(self)
        return value

    def set(self, value):
        self._value = value
        if self._pool is not None:
            self._pool.touch(self)

    def clear(self):
        self._release()
        if self._pool is not None:
            self._pool.discard(self)

    def _release(self):
        self._value = _EMPTY
        if self._owner is not None:
            self._owner._forget(self._key, self)

    def __bool__(self):
        return self._value is not _EMPTY


class ReclaimPool(object):
    """
    Bounded LRU of filled slots. When more than `capacity` slots are filled,
    the least recently used ones are cleared and dropped from their cache.
    """

    def __init__(self, capacity=None):
        self.capacity = capacity
        self._slots = OrderedDict()
        self._lock = threading.Lock()

    def touch(self, slot):
        with self._lock:
            self._slots[slot] = True
            self._slots.move_to_end(slot)
            evicted = []
            if self.capacity is not None:
                while len(self._slots) > self.capacity:
                    evicted.append(self._slots.popitem(last=False)[0])
        for old in evicted:
            old._release()

    def reclaim(self, count=None):
        """Clears the `count` least recently used slots, or all of them."""
        with self._lock:
            if count is None:
                count = len(self._slots)
            evicted = [self._slots.popitem(last=False)[0] for _ in range(min(count, len(self._slots)))]
        for old in evicted:
            old._release()

    def discard(self, slot):
        with self._lock:
            self._slots.pop(slot, None)

    def __len__(self):
        return len(self._slots)


class LazyCache(object):
    """
    Dictionary-like cache of derived values, each held in a reclaimable Slot.

    get(key, compute) returns the held value, or calls compute(key), stores
    and returns the result if the slot is empty. compute may run more than
    once for the same key, so it must only depend on key.
    """

    def __init__(self, pool=None, skip_cache=False):
        self._pool = pool
        self._skip_cache = skip_cache
        self._slots = {}
        self._lock = threading.Lock()

    def slot(self, key):
        with self._lock:
            try:
                return self._slots[key]
            except KeyError:
                s = self._slots[key] = Slot(self._pool, self, key)
                return s

    def __contains__(self, key):
        s = self._slots.get(key)
        return s is not None and bool(s)

    def __getitem__(self, key):
        s = self._slots.get(key)
        value = _EMPTY if s is None else s.get(_EMPTY)
        if value is _EMPTY:
            raise KeyError(key)
        return value

    def __setitem__(self, key, value):
        if self._skip_cache:
            return
        self.slot(key).set(value)

    def _forget(self, key, slot):
        with self._lock:
            if self._slots.get(key) is slot:
                del self._slots[key]

    def __delitem__(self, key):
        with self._lock:
            s = self._slots.pop(key)
        s.clear()

    def __len__(self):
        return sum(1 for s in list(self._slots.values()) if s)

    def get(self, key, compute):
        if self._skip_cache:
            return compute(key)
        s = self.slot(key)
        # read once: the slot may be emptied between any two observations
        value = s.get(_EMPTY)
        if value is _EMPTY:
            value = compute(key)
            s.set(value)
        return value

    def clear(self):
        with self._lock:
            slots = list(self._slots.values())
            self._slots.clear()
        for s in slots:
            s.clear()
