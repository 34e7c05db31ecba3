"""
Coin ledger — balance plus a bounded, append-only log of adjustments.
"""

from __future__ import annotations

import logging
import secrets
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from kungfu import Result, Ok, Error

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════


class EntryType(Enum):
    EARN = "earn"
    BURN = "burn"


@dataclass(frozen=True, slots=True)
class CoinLedgerEntry:
    id: str
    type: EntryType
    amount: int
    description: str
    created_at: datetime

    @property
    def delta(self) -> int:
        return self.amount if self.type is EntryType.EARN else -self.amount


@dataclass(frozen=True, slots=True)
class InsufficientCoins(Exception):
    requested: int
    balance: int

    def __str__(self) -> str:
        return f"Insufficient coins: {self.requested} requested, {self.balance} available"


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    balance: int
    entries: tuple[CoinLedgerEntry, ...]


def entry(type_: EntryType, amount: int, description: str) -> CoinLedgerEntry:
    """Build an entry stamped now."""
    return CoinLedgerEntry(
        id=secrets.token_hex(4),
        type=type_,
        amount=amount,
        description=description,
        created_at=datetime.now(timezone.utc),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Coin Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class CoinLedger:
    """
    Coin balance with its adjustment log.

    Note: entries are most-recent-first and capped at `limit`;
    the oldest fall off. Balance and log only change together in apply().
    """

    def __init__(self, balance: int = 0, limit: int = 50) -> None:
        self._balance = balance
        self._entries: deque[CoinLedgerEntry] = deque(maxlen=limit)

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def entries(self) -> tuple[CoinLedgerEntry, ...]:
        return tuple(self._entries)

    def apply(self, delta: int, *entries: CoinLedgerEntry) -> None:
        """
        Change balance by delta and append entries in the given order.

        The last entry passed ends up first in the log.
        """
        self._balance += delta
        for item in entries:
            self._entries.appendleft(item)
        logger.debug("ledger delta=%+d balance=%d entries=%d", delta, self._balance, len(entries))

    def earn(self, amount: int, description: str) -> CoinLedgerEntry:
        item = entry(EntryType.EARN, amount, description)
        self.apply(amount, item)
        return item

    def burn(self, amount: int, description: str) -> Result[CoinLedgerEntry, InsufficientCoins]:
        """Spend coins. Refuses when the balance is short, nothing is recorded."""
        if self._balance < amount:
            return Error(InsufficientCoins(amount, self._balance))
        item = entry(EntryType.BURN, amount, description)
        self.apply(-amount, item)
        return Ok(item)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(self._balance, tuple(self._entries))

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._balance = snapshot.balance
        self._entries.clear()
        self._entries.extend(snapshot.entries)


__all__ = (
    "EntryType",
    "CoinLedgerEntry",
    "InsufficientCoins",
    "LedgerSnapshot",
    "entry",
    "CoinLedger",
)
