"""Bounded read-through cache with per-key single-flight loading."""

import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from concurrent.futures import Future
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ReadThroughCache(Generic[K, V]):
    """Thread-safe LRU cache that calls ``loader`` on a miss.

    Concurrent misses on the same key share a single loader call; misses on
    distinct keys load in parallel. Failed loads are not cached: the error is
    raised to every caller waiting on that load.
    """

    def __init__(self, loader: Callable[[K], V], maxsize: int = 1000):
        if maxsize <= 0:
            msg = f"maxsize must be positive, got {maxsize}"
            raise ValueError(msg)
        self._loader = loader
        self._maxsize = maxsize
        self._lock = threading.RLock()
        self._store: OrderedDict[K, V] = OrderedDict()
        self._inflight: dict[K, Future[V]] = {}
        self._generation = 0

    def get(self, key: K) -> V:
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
                return self._store[key]
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
            generation = self._generation

        if not owner:
            return future.result()

        try:
            value = self._loader(key)
        except BaseException as exc:
            with self._lock:
                if self._inflight.get(key) is future:
                    del self._inflight[key]
            future.set_exception(exc)
            raise

        with self._lock:
            if self._inflight.get(key) is future:
                del self._inflight[key]
            # a value loaded before invalidate_all() belongs to the old snapshot
            if generation == self._generation:
                self._store[key] = value
                self._store.move_to_end(key)
                while len(self._store) > self._maxsize:
                    self._store.popitem(last=False)
        future.set_result(value)
        return value

    def invalidate_all(self) -> None:
        with self._lock:
            self._store.clear()
            self._inflight.clear()
            self._generation += 1

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
