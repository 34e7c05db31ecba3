"""
Claim store — typed storage protocol.

ClaimStore[T] — stores claims with typed value T.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, Protocol, TypeVar

from kungfu import Result, Ok, Error

from nebula_checkout.idempotency._types import ClaimState, Claim

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class ClaimStore(Protocol[T]):
    """
    Typed claim store protocol.

    Swap the memory store for a shared backend (Redis SETNX, a unique
    index) to run several instances against one registry.
    """

    async def get(self, key: str) -> Result[Claim[T] | None, StoreError]:
        """Get claim. Returns Ok(None) if absent or expired."""
        ...

    async def claim(self, key: str, ttl: timedelta | None) -> Result[bool, StoreError]:
        """
        Atomically create a PENDING claim.

        Returns Ok(True) if created, Ok(False) if the key is taken.
        Must be insert-if-absent.
        """
        ...

    async def fulfil(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        """Store the value and mark COMPLETED."""
        ...

    async def replace(self, key: str, value: T) -> Result[bool, StoreError]:
        """Swap the value of a COMPLETED claim. Ok(False) if there is none."""
        ...

    async def release(self, key: str) -> Result[bool, StoreError]:
        """Delete claim. Returns Ok(True) if existed."""
        ...

    async def clear(self) -> Result[int, StoreError]:
        """Delete every claim. Returns count."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class _StoredClaim(Generic[T]):
    """Internal mutable claim for MemoryClaimStore."""

    key: str
    state: ClaimState
    value: T | None
    created_at: datetime
    expires_at: datetime | None

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and datetime.now() > self.expires_at

    def to_claim(self) -> Claim[T]:
        return Claim(
            key=self.key,
            state=self.state,
            value=self.value,
            created_at=self.created_at,
            expires_at=self.expires_at,
        )


class MemoryClaimStore(Generic[T]):
    """
    In-memory claim store.

    Note: Single process only: no distributed lock, nothing survives a
    restart. Every operation holds one asyncio.Lock, which makes claim()
    insert-if-absent.
    """

    def __init__(self) -> None:
        self._claims: dict[str, _StoredClaim[T]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._claims)

    async def get(self, key: str) -> Result[Claim[T] | None, StoreError]:
        async with self._lock:
            stored = self._claims.get(key)
            if stored is None:
                return Ok(None)
            if stored.expired:
                del self._claims[key]
                return Ok(None)
            return Ok(stored.to_claim())

    async def claim(self, key: str, ttl: timedelta | None) -> Result[bool, StoreError]:
        async with self._lock:
            existing = self._claims.get(key)
            if existing is not None:
                if not existing.expired:
                    return Ok(False)
                del self._claims[key]

            now = datetime.now()
            self._claims[key] = _StoredClaim(
                key=key,
                state=ClaimState.PENDING,
                value=None,
                created_at=now,
                expires_at=now + ttl if ttl else None,
            )
            return Ok(True)

    async def fulfil(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        async with self._lock:
            existing = self._claims.get(key)
            if existing is None:
                return Error(StoreError(f"No pending claim for key: {key}"))

            existing.state = ClaimState.COMPLETED
            existing.value = value
            existing.expires_at = datetime.now() + ttl if ttl else None
            return Ok(None)

    async def replace(self, key: str, value: T) -> Result[bool, StoreError]:
        async with self._lock:
            existing = self._claims.get(key)
            if existing is None or existing.state != ClaimState.COMPLETED:
                return Ok(False)
            existing.value = value
            return Ok(True)

    async def release(self, key: str) -> Result[bool, StoreError]:
        async with self._lock:
            return Ok(self._claims.pop(key, None) is not None)

    async def clear(self) -> Result[int, StoreError]:
        async with self._lock:
            count = len(self._claims)
            self._claims.clear()
            return Ok(count)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

type ClaimStoreAny = ClaimStore[Any]


__all__ = (
    "StoreError",
    "ClaimStore",
    "ClaimStoreAny",
    "MemoryClaimStore",
)
