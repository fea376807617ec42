"""Unit tests for snapshot export and restore."""
import json

import pytest

from shopledger.core.errors import MalformedSnapshot
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.models import BusinessInfo, Invoice, InvoiceItem, Product
from shopledger.store.memory import MemoryRecordStore


@pytest.fixture
def populated(keeper, customer):
    keeper.catalog.save_product(Product(id="P", name="Cable", price=100, stock=10))
    keeper.invoices.create(
        Invoice(
            id="INV-1",
            party_id="C1",
            items=[InvoiceItem(product_id="P", quantity=2, price=100)],
            received_amount=50,
        )
    )
    keeper.catalog.save_business_info(BusinessInfo(name="Mobile Fix"))
    return keeper


class TestExport:
    def test_snapshot_has_every_collection(self, populated):
        snapshot = populated.backup.export_snapshot()

        assert "timestamp" in snapshot
        assert len(snapshot["products"]) == 1
        assert len(snapshot["parties"]) == 1
        assert len(snapshot["invoices"]) == 1
        assert len(snapshot["stock_history"]) == 2
        assert len(snapshot["cashbook"]) == 1
        assert snapshot["business_info"]["name"] == "Mobile Fix"

    def test_snapshot_is_json_serializable(self, populated):
        json.dumps(populated.backup.export_snapshot())

    def test_empty_store_has_no_profile(self, keeper):
        assert keeper.backup.export_snapshot()["business_info"] is None


class TestRestore:
    def test_restore_into_fresh_store(self, populated):
        payload = json.dumps(populated.backup.export_snapshot())

        fresh = Bookkeeper(MemoryRecordStore())
        assert fresh.backup.import_snapshot(payload) is True

        assert fresh.catalog.get_product("P").stock == 8
        assert fresh.catalog.get_party("C1").balance == 150
        assert fresh.invoices.get("INV-1").due_amount == 150
        assert fresh.cashbook.get("CASH-INV-INV-1").amount == 50
        assert fresh.catalog.business_info().name == "Mobile Fix"
        assert fresh.stock.ledger_total("P") == 8

    def test_restore_replaces_only_present_collections(self, populated):
        restored = populated.backup.restore({"products": []})

        assert restored == ["products"]
        assert populated.catalog.products() == []
        assert populated.catalog.get_party("C1") is not None

    def test_unknown_keys_ignored(self, keeper):
        assert keeper.backup.restore({"products": [], "settings": {"theme": "dark"}}) == ["products"]

    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            "[1, 2, 3]",
            {"products": "oops"},
            {"products": [{"name": "no id"}]},
            {"products": [], "invoices": [{"id": "I", "type": "BARTER"}]},
        ],
    )
    def test_malformed_leaves_store_untouched(self, populated, payload):
        before = populated.backup.export_snapshot()

        assert populated.backup.import_snapshot(payload) is False
        with pytest.raises(MalformedSnapshot):
            populated.backup.restore(payload)

        after = populated.backup.export_snapshot()
        before.pop("timestamp")
        after.pop("timestamp")
        assert after == before
