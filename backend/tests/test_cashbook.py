"""Unit tests for the cashbook and its party balance effects."""
import pytest

from shopledger.core.errors import LockedEntryError
from shopledger.engine.cashbook import linked_cash_id
from shopledger.models import CashTransaction, CashType


class TestRecord:
    def test_assigns_id_and_party_name(self, keeper, customer):
        tx = keeper.cashbook.record(
            CashTransaction(id="", type=CashType.IN, amount=40, party_id="C1")
        )
        assert tx.id.startswith("CASH-")
        assert tx.party_name == "Asha Traders"
        assert keeper.cashbook.get(tx.id) is not None

    def test_cash_in_reduces_balance(self, keeper, customer):
        keeper.cashbook.record(CashTransaction(id="", type=CashType.IN, amount=40, party_id="C1"))
        assert keeper.catalog.get_party("C1").balance == -40

    def test_cash_out_increases_balance(self, keeper, supplier):
        keeper.cashbook.record(CashTransaction(id="", type=CashType.OUT, amount=75, party_id="S1"))
        assert keeper.catalog.get_party("S1").balance == 75

    def test_resave_replaces_previous_effect(self, keeper, customer):
        tx = keeper.cashbook.record(
            CashTransaction(id="", type=CashType.IN, amount=40, party_id="C1")
        )
        tx.amount = 10
        keeper.cashbook.record(tx)
        assert keeper.catalog.get_party("C1").balance == -10
        assert len(keeper.cashbook.list()) == 1

    def test_unknown_party_is_skipped(self, keeper):
        tx = keeper.cashbook.record(
            CashTransaction(id="", type=CashType.IN, amount=5, party_id="NOPE")
        )
        assert tx.party_name is None
        assert keeper.cashbook.get(tx.id).amount == 5


class TestDelete:
    def test_exact_inverse_after_other_entries(self, keeper, customer):
        first = keeper.cashbook.record(
            CashTransaction(id="", type=CashType.IN, amount=30, party_id="C1")
        )
        keeper.cashbook.record(CashTransaction(id="", type=CashType.IN, amount=20, party_id="C1"))
        keeper.cashbook.record(CashTransaction(id="", type=CashType.OUT, amount=5, party_id="C1"))
        assert keeper.catalog.get_party("C1").balance == -45

        assert keeper.cashbook.delete(first.id) is True
        assert keeper.catalog.get_party("C1").balance == -15

    def test_unknown_id_returns_false(self, keeper):
        assert keeper.cashbook.delete("CASH-missing") is False

    def test_linked_entry_refused(self, keeper, customer):
        keeper.cashbook.record(
            CashTransaction(
                id=linked_cash_id("INV-1"),
                type=CashType.IN,
                amount=10,
                party_id="C1",
                linked_invoice_id="INV-1",
            )
        )
        with pytest.raises(LockedEntryError) as exc:
            keeper.cashbook.delete("CASH-INV-INV-1")
        assert exc.value.invoice_id == "INV-1"
        assert keeper.cashbook.get("CASH-INV-INV-1") is not None
        assert keeper.catalog.get_party("C1").balance == -10


class TestList:
    def test_filters(self, keeper, customer, supplier):
        keeper.cashbook.record(CashTransaction(id="", type=CashType.IN, amount=1, party_id="C1"))
        keeper.cashbook.record(CashTransaction(id="", type=CashType.OUT, amount=2, party_id="S1"))
        keeper.cashbook.record(CashTransaction(id="", type=CashType.OUT, amount=3))

        assert len(keeper.cashbook.list()) == 3
        assert [t.amount for t in keeper.cashbook.list(cash_type=CashType.IN)] == [1]
        assert [t.amount for t in keeper.cashbook.list(party_id="S1")] == [2]

    def test_locked_flag(self):
        assert CashTransaction(id="x", type=CashType.IN, amount=1, linked_invoice_id="I").locked
        assert not CashTransaction(id="x", type=CashType.IN, amount=1).locked
