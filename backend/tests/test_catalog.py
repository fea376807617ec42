"""Unit tests for products, parties, the business profile and seeding."""
from shopledger.engine.catalog import DEMO_PRODUCTS
from shopledger.models import BusinessInfo, Party, PartyType, Product, StockMovementType


class TestProducts:
    def test_create_logs_opening_stock(self, keeper):
        product = keeper.catalog.save_product(Product(id="", name="Cable", stock=12))

        assert product.id.startswith("PROD-")
        assert product.opening_stock == 12
        assert keeper.catalog.get_product(product.id).stock == 12
        [entry] = keeper.stock.query_history(product.id)
        assert entry.type == StockMovementType.OPENING
        assert entry.quantity == 12

    def test_create_without_stock_logs_nothing(self, keeper):
        product = keeper.catalog.save_product(Product(id="", name="Cable"))
        assert keeper.catalog.get_product(product.id) is not None
        assert keeper.stock.query_history() == []

    def test_edit_changing_stock_logs_adjustment(self, keeper):
        product = keeper.catalog.save_product(Product(id="P", name="Cable", stock=12))
        product.stock = 9
        product.price = 150
        keeper.catalog.save_product(product)

        saved = keeper.catalog.get_product("P")
        assert saved.stock == 9
        assert saved.price == 150
        assert saved.opening_stock == 12
        latest = keeper.stock.query_history("P")[0]
        assert latest.type == StockMovementType.ADJUSTMENT
        assert latest.quantity == -3
        assert keeper.stock.ledger_total("P") == 9

    def test_edit_without_stock_change_logs_nothing(self, keeper):
        product = keeper.catalog.save_product(Product(id="P", name="Cable", stock=12))
        product.name = "USB Cable"
        keeper.catalog.save_product(product)

        assert keeper.catalog.get_product("P").name == "USB Cable"
        assert len(keeper.stock.query_history("P")) == 1

    def test_find_by_sku_and_barcode(self, keeper):
        keeper.catalog.save_product(Product(id="P", name="Cable", sku="CBL-1", barcode="8901234"))
        assert keeper.catalog.find_product("P").id == "P"
        assert keeper.catalog.find_product("CBL-1").id == "P"
        assert keeper.catalog.find_product("8901234").id == "P"
        assert keeper.catalog.find_product("nope") is None

    def test_search(self, keeper):
        keeper.catalog.save_product(Product(id="A", name="Fast Charger", sku="CHG"))
        keeper.catalog.save_product(Product(id="B", name="Battery", sku="BAT"))
        assert [p.id for p in keeper.catalog.products("charg")] == ["A"]
        assert [p.id for p in keeper.catalog.products("bat")] == ["B"]
        assert len(keeper.catalog.products()) == 2

    def test_delete_keeps_history(self, keeper):
        keeper.catalog.save_product(Product(id="P", name="Cable", stock=3))
        assert keeper.catalog.delete_product("P") is True
        assert keeper.catalog.delete_product("P") is False
        assert len(keeper.stock.query_history("P")) == 1

    def test_adjust_stock(self, keeper):
        keeper.catalog.save_product(Product(id="P", name="Cable", stock=12))

        entry, alert = keeper.catalog.adjust_stock("P", StockMovementType.DAMAGE, 4, "cracked")

        assert entry.quantity == -4
        assert entry.note == "cracked"
        assert keeper.catalog.get_product("P").stock == 8
        assert alert.level == "LOW"

    def test_adjust_unknown_product(self, keeper):
        assert keeper.catalog.adjust_stock("nope", StockMovementType.PURCHASE, 1) is None


class TestParties:
    def test_balance_cannot_be_set_directly(self, keeper):
        party = keeper.catalog.save_party(Party(id="", name="Ravi", balance=500))
        assert party.id.startswith("PARTY-")
        assert keeper.catalog.get_party(party.id).balance == 0

    def test_update_preserves_balance(self, keeper, customer, product):
        from shopledger.models import Invoice, InvoiceItem

        keeper.invoices.create(
            Invoice(id="", party_id="C1", items=[InvoiceItem(product_id="P", quantity=1, price=80)])
        )
        keeper.catalog.save_party(Party(id="C1", name="Asha Traders Pvt", balance=0))

        saved = keeper.catalog.get_party("C1")
        assert saved.name == "Asha Traders Pvt"
        assert saved.balance == 80

    def test_filter_by_type(self, keeper, customer, supplier):
        assert [p.id for p in keeper.catalog.parties(PartyType.SUPPLIER)] == ["S1"]
        assert [p.id for p in keeper.catalog.parties(search="asha")] == ["C1"]


class TestBusinessInfo:
    def test_default_profile(self, keeper):
        assert keeper.catalog.business_info().name == "ShopLedger POS"

    def test_save_profile(self, keeper):
        keeper.catalog.save_business_info(BusinessInfo(name="Mobile Fix", phone="98765"))
        keeper.catalog.save_business_info(BusinessInfo(name="Mobile Fix 2"))
        assert keeper.catalog.business_info().name == "Mobile Fix 2"
        assert len(keeper.store.business_info.all()) == 1


class TestSeedDefaults:
    def test_seeds_empty_store(self, keeper):
        keeper.catalog.seed_defaults()

        assert len(keeper.catalog.products()) == len(DEMO_PRODUCTS)
        walk_in = keeper.catalog.get_party("WALK_IN")
        assert walk_in.name == "Walk-in Customer"
        assert all(row.drift == 0 for row in keeper.reports.stock_reconciliation())

    def test_leaves_existing_data_alone(self, keeper, customer):
        keeper.catalog.save_product(Product(id="P", name="Mine"))
        keeper.catalog.seed_defaults()

        assert [p.id for p in keeper.catalog.products()] == ["P"]
        assert keeper.catalog.get_party("WALK_IN") is None
