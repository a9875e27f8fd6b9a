# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""In-memory TTL caches.

- `cache_base.MemoryCache`: expiration-aware key/value store (lazy expiry on read)
- `cache_cleaned.CleanedMemoryCache`: same, plus a background sweep for unbounded key spaces
"""

from .cache_base import CacheEntry, CacheStats, MemoryCache
from .cache_cleaned import CleanedMemoryCache

__all__ = ["CacheEntry", "CacheStats", "MemoryCache", "CleanedMemoryCache"]
