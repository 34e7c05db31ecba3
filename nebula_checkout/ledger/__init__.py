"""
Ledger — coin balance and its append-only log.

    from nebula_checkout import ledger as LG

    coins = LG.CoinLedger(balance=200)
    coins.earn(105, "Checkout ps_...")
    coins.burn(500, "Boost")  # Error(InsufficientCoins)
"""

from nebula_checkout.ledger._ledger import (
    EntryType,
    CoinLedgerEntry,
    InsufficientCoins,
    LedgerSnapshot,
    entry,
    CoinLedger,
)

__all__ = (
    "EntryType",
    "CoinLedgerEntry",
    "InsufficientCoins",
    "LedgerSnapshot",
    "entry",
    "CoinLedger",
)
