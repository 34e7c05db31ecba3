"""
Snapshot transaction — apply tentative state, restore it on failure.

    with transaction(store):
        store.ledger.apply(...)
        store.orders = ...
        # any exception here restores the snapshot and re-raises
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

logger = logging.getLogger(__name__)


class Snapshottable[S](Protocol):
    def snapshot(self) -> S: ...

    def restore(self, snapshot: S) -> None: ...


@contextmanager
def transaction[S](target: Snapshottable[S]) -> Iterator[S]:
    """Snapshot target, restore it if the block raises."""
    snapshot = target.snapshot()
    try:
        yield snapshot
    except BaseException:
        target.restore(snapshot)
        logger.debug("transaction rolled back on %s", type(target).__name__)
        raise


__all__ = ("Snapshottable", "transaction")
