# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Process-local key-value store with TTL support.

Used when no Redis URL is configured and as the store double in tests.
Expiry is evaluated lazily on access.
"""

from __future__ import annotations

import asyncio
import fnmatch
import time
from collections.abc import Callable


class InMemoryKeyValueStore:
    """Dictionary-backed implementation of ``ProtocolKeyValueStore``."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self._lock = asyncio.Lock()

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._expired(expires_at):
                del self._data[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        async with self._lock:
            expires_at = self._clock() + ttl_seconds if ttl_seconds else None
            self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> int:
        async with self._lock:
            return 1 if self._data.pop(key, None) is not None else 0

    async def keys(self, pattern: str) -> list[str]:
        async with self._lock:
            live = [
                key
                for key, (_, expires_at) in self._data.items()
                if not self._expired(expires_at)
            ]
        return sorted(key for key in live if fnmatch.fnmatchcase(key, pattern))

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._data)


__all__ = ["InMemoryKeyValueStore"]
