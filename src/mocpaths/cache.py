"""In-memory caches for parent sets and calculated paths.

Both caches are cleared together whenever the corpus or the settings may
have changed; entries are never invalidated one key at a time.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Generic, TypeVar

log = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class KeyedCache(Generic[K, V]):
    """Thread-safe memo with single-flight computation per key."""

    def __init__(self, name: str = "cache") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._entries: dict[K, V] = {}
        self._inflight: dict[K, Future[V]] = {}
        self._generation = 0

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: K) -> V | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._inflight.clear()
            self._generation += 1
        log.debug("Cleared %s", self.name)

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for ``key``, computing it at most once.

        Callers that arrive while another thread is computing the same key
        wait for that result instead of starting a second computation. A
        result computed across a :meth:`clear` is returned to its callers but
        not stored.
        """
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
            generation = self._generation

        if not owner:
            return future.result()

        try:
            value = compute()
        except BaseException as e:
            with self._lock:
                if self._inflight.get(key) is future:
                    del self._inflight[key]
            future.set_exception(e)
            raise

        with self._lock:
            if generation == self._generation:
                self._entries[key] = value
            if self._inflight.get(key) is future:
                del self._inflight[key]
        future.set_result(value)
        return value


class NullCache(KeyedCache[K, V]):
    """Cache that never stores anything."""

    def set(self, key: K, value: V) -> None:
        return None

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        return compute()


@dataclass
class PathCaches:
    """The parent-set and path-set caches, invalidated together."""

    parents: KeyedCache = field(default_factory=lambda: KeyedCache("parent cache"))
    paths: KeyedCache = field(default_factory=lambda: KeyedCache("path cache"))

    def clear(self) -> None:
        self.parents.clear()
        self.paths.clear()

    @classmethod
    def disabled(cls) -> PathCaches:
        return cls(parents=NullCache("parent cache"), paths=NullCache("path cache"))
