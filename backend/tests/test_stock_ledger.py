"""Unit tests for the stock ledger and stock alerts."""
import pytest

from shopledger.engine.stock_ledger import (
    StockLedger,
    signed_quantity,
    stock_alert,
    stock_status,
)
from shopledger.models import Product, StockMovementType


class TestSignedQuantity:
    def test_inbound_types_positive(self):
        for movement in (StockMovementType.OPENING, StockMovementType.PURCHASE, StockMovementType.RETURN_IN):
            assert signed_quantity(movement, 4) == 4
            assert signed_quantity(movement, -4) == 4

    def test_outbound_types_negative(self):
        for movement in (
            StockMovementType.SALE,
            StockMovementType.RETURN_OUT,
            StockMovementType.DAMAGE,
            StockMovementType.TRANSFER,
        ):
            assert signed_quantity(movement, 3) == -3

    def test_adjustment_keeps_caller_sign(self):
        assert signed_quantity(StockMovementType.ADJUSTMENT, -2) == -2
        assert signed_quantity(StockMovementType.ADJUSTMENT, 2) == 2

    def test_rounds_to_three_places(self):
        assert signed_quantity(StockMovementType.PURCHASE, 1.23456) == 1.235


class TestStockAlert:
    def test_no_alert_above_threshold(self):
        assert stock_alert(Product(id="A", name="A", stock=11)) is None

    def test_low_at_default_threshold(self):
        alert = stock_alert(Product(id="A", name="A", stock=10))
        assert alert.level == "LOW"
        assert alert.reorder_level == 10

    def test_own_reorder_level_wins(self):
        assert stock_alert(Product(id="A", name="A", stock=8, reorder_level=5)) is None
        assert stock_alert(Product(id="A", name="A", stock=5, reorder_level=5)).level == "LOW"

    def test_zero_reorder_level_is_kept(self):
        product = Product(id="A", name="A", stock=5, reorder_level=0)
        assert stock_alert(product) is None
        assert stock_status(product) == "Available"
        assert stock_alert(Product(id="A", name="A", stock=0, reorder_level=0)).level == "OUT_OF_STOCK"

    def test_out_of_stock_and_negative(self):
        assert stock_alert(Product(id="A", name="A", stock=0)).level == "OUT_OF_STOCK"
        assert stock_alert(Product(id="A", name="A", stock=-1)).level == "NEGATIVE"

    def test_status_labels(self):
        assert stock_status(Product(id="A", name="A", stock=0)) == "Out of Stock"
        assert stock_status(Product(id="A", name="A", stock=3)) == "Low"
        assert stock_status(Product(id="A", name="A", stock=50)) == "Available"


class TestStockLedger:
    @pytest.fixture
    def ledger(self, store):
        return StockLedger(store)

    def test_move_updates_cache_and_logs_entry(self, store, ledger):
        product = Product(id="P", name="P", stock=0)
        store.products.upsert(product)

        entry = ledger.move(product, StockMovementType.PURCHASE, 5, note="restock")

        assert store.products.get("P").stock == 5
        assert entry.previous_stock == 0
        assert entry.new_stock == 5
        assert entry.quantity == 5
        assert entry.id.startswith("STK-")
        assert store.stock_history.get(entry.id).note == "restock"

    def test_stock_may_go_negative(self, store, ledger):
        product = Product(id="P", name="P", stock=0)
        store.products.upsert(product)
        ledger.move(product, StockMovementType.SALE, -2)
        assert store.products.get("P").stock == -2

    def test_history_newest_first(self, store, ledger):
        product = Product(id="P", name="P", stock=0)
        store.products.upsert(product)
        first = ledger.move(product, StockMovementType.PURCHASE, 5)
        second = ledger.move(product, StockMovementType.SALE, -1)
        third = ledger.move(product, StockMovementType.DAMAGE, -1)

        history = ledger.query_history("P")
        assert [e.id for e in history] == [third.id, second.id, first.id]

    def test_history_filters_by_product(self, store, ledger):
        a = Product(id="A", name="A")
        b = Product(id="B", name="B")
        store.products.upsert(a)
        store.products.upsert(b)
        ledger.move(a, StockMovementType.PURCHASE, 1)
        ledger.move(b, StockMovementType.PURCHASE, 2)

        assert [e.product_id for e in ledger.query_history("B")] == ["B"]
        assert len(ledger.query_history()) == 2

    def test_ledger_total_matches_stock(self, store, ledger):
        product = Product(id="P", name="P")
        store.products.upsert(product)
        ledger.move(product, StockMovementType.OPENING, 10)
        ledger.move(product, StockMovementType.SALE, -3)
        ledger.move(product, StockMovementType.ADJUSTMENT, 1)

        assert ledger.ledger_total("P") == store.products.get("P").stock == 8
