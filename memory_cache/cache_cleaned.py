# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
MemoryCache with a periodic background sweep.

Use this for key spaces that grow without bound (one key per installation, per
artifact, per (repo, run) pair). Lazy expiry on read only frees an entry when the same
key is asked for again; the sweep frees entries that are never asked for again.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .cache_base import K, MemoryCache, V

_logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_S: float = 5 * 60


class CleanedMemoryCache(MemoryCache[K, V]):
    """MemoryCache whose expired entries are evicted every `sweep_interval_s` seconds.

    The sweep thread is a daemon and starts lazily on the first store, so creating a cache
    (e.g. in a test) does not spawn a thread. Call `close()` to stop it.
    """

    def __init__(
        self,
        *,
        sweep_interval_s: float = DEFAULT_SWEEP_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
        name: str = "",
    ):
        super().__init__(clock=clock)
        if float(sweep_interval_s) <= 0:
            raise ValueError(f"sweep_interval_s must be positive, got {sweep_interval_s!r}")
        self.sweep_interval_s = float(sweep_interval_s)
        self.name = str(name or self.__class__.__name__)
        self._stop_event = threading.Event()
        self._thread_mu = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def _store(self, key: K, value: V, ttl_s: float) -> V:
        self.start()
        return super()._store(key, value, ttl_s)

    @property
    def running(self) -> bool:
        th = self._thread
        return th is not None and th.is_alive()

    def start(self) -> None:
        """Start the sweep thread (no-op if it is already running or the cache was closed)."""
        with self._thread_mu:
            if self._thread is not None or self._stop_event.is_set():
                return
            self._thread = threading.Thread(
                target=self._sweep_loop,
                daemon=True,
                name=f"{self.name}-sweep",
            )
            self._thread.start()
        _logger.debug("Started cache sweep %s every %.0fs", self.name, self.sweep_interval_s)

    def close(self) -> None:
        """Stop the sweep thread. Entries stay readable; no new thread is started afterwards."""
        self._stop_event.set()
        th = self._thread
        if th is not None and th.is_alive() and th is not threading.current_thread():
            th.join(timeout=10)

    def __enter__(self) -> "CleanedMemoryCache[K, V]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(timeout=self.sweep_interval_s):
            try:
                evicted = self.cleanup()
                if evicted:
                    _logger.debug("Cache sweep %s evicted %d expired entries (%d left)", self.name, evicted, len(self))
            except Exception as e:
                # Keep sweeping; a failed pass only delays eviction until the next one.
                _logger.error("Cache sweep %s failed: %s", self.name, e, exc_info=True)
