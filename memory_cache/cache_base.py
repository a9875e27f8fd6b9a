# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Thread-safe in-memory TTL cache.

Every entry carries its own expiration instant. An entry whose `expires_at` has
passed is treated as absent: `fetch()` recomputes it, `get()` drops it.

Consistency model:
- The lock guards the dict only. `compute` callbacks run outside the lock, so a slow
  network call for one key never blocks readers of other keys.
- There is no single-flight: two threads missing the same key at the same time may
  both run `compute`, and the last one to finish wins. Everything cached here (token
  mints, list reads, redirect URLs) is safe to compute twice.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value and the (clock) instant after which it is stale."""

    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


@dataclass
class CacheStats:
    """Basic cache statistics tracked automatically by MemoryCache."""
    hit: int = 0
    miss: int = 0
    write: int = 0
    evict: int = 0


class MemoryCache(Generic[K, V]):
    """Key -> value store where each entry expires `ttl_s` seconds after it was stored.

    Keys may be any hashable value, including tuples such as (owner, repo, artifact_id).

    Args:
        clock: Monotonic seconds source. Tests pass a fake clock to step time deterministically.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic):
        self._mu = Lock()
        self._clock = clock
        self._data: Dict[K, CacheEntry[V]] = {}
        self.stats = CacheStats()

    def _store(self, key: K, value: V, ttl_s: float) -> V:
        """Store `value` under `key`. Caller must NOT hold the lock."""
        entry = CacheEntry(value=value, expires_at=self._clock() + float(ttl_s))
        with self._mu:
            self._data[key] = entry
            self.stats.write += 1
        return value

    def _live_entry(self, key: K) -> Optional[CacheEntry[V]]:
        """Return the live entry for `key` (dropping it if expired). Caller must hold the lock."""
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._data[key]
            self.stats.evict += 1
            return None
        return entry

    def fetch(self, key: K, ttl_s: float, compute: Callable[[], V]) -> V:
        """Return the cached value for `key`, computing and storing it on a miss.

        If `compute` raises, nothing is stored and the exception propagates unchanged.
        """
        with self._mu:
            entry = self._live_entry(key)
            if entry is not None:
                self.stats.hit += 1
                return entry.value
            self.stats.miss += 1

        value = compute()
        return self._store(key, value, ttl_s)

    def write(self, key: K, value: V, ttl_s: float) -> V:
        """Store `value` unconditionally, replacing any live entry (forced refresh)."""
        return self._store(key, value, ttl_s)

    def get(self, key: K) -> Optional[V]:
        """Return the live value for `key`, or None."""
        with self._mu:
            entry = self._live_entry(key)
            if entry is None:
                self.stats.miss += 1
                return None
            self.stats.hit += 1
            return entry.value

    def delete(self, key: K) -> bool:
        with self._mu:
            return self._data.pop(key, None) is not None

    def clear(self) -> None:
        with self._mu:
            self._data.clear()

    def cleanup(self) -> int:
        """Evict every expired entry. Returns how many were removed.

        Live entries are never touched.
        """
        with self._mu:
            now = self._clock()
            expired = [k for (k, e) in self._data.items() if e.is_expired(now)]
            for k in expired:
                del self._data[k]
            self.stats.evict += len(expired)
        return len(expired)

    def __contains__(self, key: object) -> bool:
        with self._mu:
            entry = self._data.get(key)  # type: ignore[call-overload]
            return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet evicted."""
        with self._mu:
            return len(self._data)
