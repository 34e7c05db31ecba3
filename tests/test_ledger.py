"""Coin ledger."""

from kungfu import Ok, Error

from nebula_checkout.ledger import CoinLedger, EntryType, InsufficientCoins


class TestCoinLedger:
    def test_earn_and_burn(self) -> None:
        ledger = CoinLedger(balance=10)
        ledger.earn(90, "top-up")
        match ledger.burn(30, "boost"):
            case Error(err):
                raise AssertionError(f"unexpected {err}")
            case Ok(_):
                pass

        assert ledger.balance == 70
        assert [e.type for e in ledger.entries] == [EntryType.BURN, EntryType.EARN]

    def test_burn_refuses_short_balance(self) -> None:
        ledger = CoinLedger(balance=20)
        match ledger.burn(50, "boost"):
            case Error(err):
                assert err == InsufficientCoins(50, 20)
            case Ok(_):
                raise AssertionError("expected refusal")
        assert ledger.balance == 20
        assert ledger.entries == ()

    def test_bounded_most_recent_first(self) -> None:
        ledger = CoinLedger()
        produced = [ledger.earn(1, f"op {n}") for n in range(60)]

        assert len(ledger.entries) == 50
        assert list(ledger.entries) == list(reversed(produced[-50:]))
        assert ledger.balance == 60

    def test_apply_keeps_order_of_entries(self) -> None:
        ledger = CoinLedger()
        earn = ledger.earn(5, "a")
        ledger.apply(0)
        assert ledger.entries == (earn,)

    def test_snapshot_restore(self) -> None:
        ledger = CoinLedger(balance=100)
        ledger.earn(5, "a")
        snap = ledger.snapshot()

        ledger.earn(50, "b")
        ledger.burn(10, "c")
        ledger.restore(snap)

        assert ledger.balance == 105
        assert [e.description for e in ledger.entries] == ["a"]

    def test_entry_delta(self) -> None:
        ledger = CoinLedger(balance=10)
        spent = ledger.burn(4, "x").value
        assert spent.delta == -4
