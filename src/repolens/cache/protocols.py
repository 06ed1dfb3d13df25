# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Key-value store protocol consumed by the summary cache.

Implementations:
    - RedisKeyValueStore: remote Redis-compatible store (production)
    - InMemoryKeyValueStore: process-local store (development, tests)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ProtocolKeyValueStore(Protocol):
    """TTL-capable string key-value store.

    Every method raises ``StoreUnavailableError`` on transport failure. A
    missing key is never an error.
    """

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent or expired."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store ``value``, replacing any existing value."""
        ...

    async def delete(self, key: str) -> int:
        """Delete ``key``; return the number of keys removed (0 or 1)."""
        ...

    async def keys(self, pattern: str) -> list[str]:
        """Return every key matching the glob ``pattern`` (possibly empty)."""
        ...

    async def close(self) -> None:
        """Release connections. Safe to call more than once."""
        ...


__all__ = ["ProtocolKeyValueStore"]
