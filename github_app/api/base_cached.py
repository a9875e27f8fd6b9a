# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Base classes for cached GitHub API resources.

Goal: make each cached resource readable + debuggable by enforcing a small interface:
- cache key (the full parameter tuple of the logical query, token included)
- API call "display format"
- the actual (paginated) fetch
- shared cache access pattern + hit/miss reporting on the API client

List results are materialized before they are stored: a miss walks every page first,
then the items are handed back. A failure on any page stores nothing.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

from common import DEFAULT_LIST_TTL_S
from memory_cache import CleanedMemoryCache, MemoryCache

if TYPE_CHECKING:  # pragma: no cover
    from .. import GitHubAPIClient

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class _CachedResource(ABC, Generic[T]):
    """Shared constructor + key plumbing for cached resources."""

    def __init__(
        self,
        api: "GitHubAPIClient",
        *,
        ttl_s: float,
        cache: Optional[MemoryCache[Hashable, Any]] = None,
    ):
        self.api: GitHubAPIClient = api
        self.ttl_s = float(ttl_s)
        self.cache: MemoryCache[Hashable, Any] = cache if cache is not None else CleanedMemoryCache(name=self.cache_name)

    @property
    @abstractmethod
    def cache_name(self) -> str:
        """Short name used for stats keys (e.g. 'artifacts')."""

    @abstractmethod
    def api_call_format(self) -> str:
        """Human-readable description of the API call(s) this resource performs."""

    @abstractmethod
    def cache_key(self, **kwargs: Any) -> Tuple[Hashable, ...]:
        """Return the cache key for one logical query."""

    def close(self) -> None:
        """Stop the cache's sweep thread, if it has one."""
        if isinstance(self.cache, CleanedMemoryCache):
            self.cache.close()

    def _lookup(self, key: Tuple[Hashable, ...]) -> Optional[Any]:
        cached = self.cache.get(key)
        if cached is None:
            self.api._cache_miss(self.cache_name)
        else:
            self.api._cache_hit(self.cache_name)
        return cached


class CachedListResource(_CachedResource[T]):
    """A paginated list whose full result is cached per parameter tuple.

    Subclasses implement `fetch(**kwargs)` as a lazy iterator over decoded items
    (normally `pagination.iter_json_list`).
    """

    def __init__(
        self,
        api: "GitHubAPIClient",
        *,
        ttl_s: float = DEFAULT_LIST_TTL_S,
        cache: Optional[MemoryCache[Hashable, Any]] = None,
    ):
        super().__init__(api, ttl_s=ttl_s, cache=cache)

    @abstractmethod
    def fetch(self, **kwargs: Any) -> Iterator[T]:
        """Fetch from network, yielding items in server order."""

    def get(self, **kwargs: Any) -> List[T]:
        """Shared get() flow: cache lookup -> full fetch on miss -> cache write -> replay."""
        key = self.cache_key(**kwargs)
        cached = self._lookup(key)
        if cached is not None:
            return list(cached)

        # Materialize before storing: a failure part-way leaves the cache untouched.
        items: Tuple[T, ...] = tuple(self.fetch(**kwargs))
        self.cache.write(key, items, self.ttl_s)
        self.api._cache_write(self.cache_name)
        _logger.debug("Cached %d %s item(s) for %ss", len(items), self.cache_name, int(self.ttl_s))
        return list(items)


class CachedValueResource(_CachedResource[T]):
    """A single value (not a list) cached per parameter tuple."""

    @abstractmethod
    def fetch(self, **kwargs: Any) -> T:
        """Fetch the value from network."""

    def get(self, **kwargs: Any) -> T:
        key = self.cache_key(**kwargs)
        cached = self._lookup(key)
        if cached is not None:
            return cached
        value = self.fetch(**kwargs)
        self.cache.write(key, value, self.ttl_s)
        self.api._cache_write(self.cache_name)
        return value
