"""Unit tests for dashboard, statement and period reports."""
from datetime import date, datetime

from shopledger.models import (
    CashTransaction,
    CashType,
    Invoice,
    InvoiceItem,
    Product,
    TransactionType,
)


def _invoice(party_id, type, quantity, price, received=0, when=None):
    inv = Invoice(
        id="",
        party_id=party_id,
        type=type,
        items=[InvoiceItem(product_id="P", quantity=quantity, price=price)],
        received_amount=received,
    )
    if when:
        inv.date = when
    return inv


class TestDashboard:
    def test_totals_net_of_returns(self, keeper, customer, supplier):
        keeper.catalog.save_product(Product(id="P", name="P", price=100, cost=60, stock=50))
        keeper.invoices.create(_invoice("C1", TransactionType.SALE, 3, 100))
        keeper.invoices.create(_invoice("C1", TransactionType.SALE_RETURN, 1, 100))
        keeper.invoices.create(_invoice("S1", TransactionType.PURCHASE, 10, 60, received=200))

        stats = keeper.reports.dashboard_stats()

        assert stats.total_sales == 200
        assert stats.total_purchases == 600
        assert stats.total_receivable == 200
        assert stats.total_payable == 400
        assert stats.net_profit == -400
        assert stats.invoice_count == 3
        assert stats.product_count == 1
        assert stats.low_stock_count == 0

    def test_low_stock_counted(self, keeper):
        keeper.catalog.save_product(Product(id="A", name="A", stock=2))
        keeper.catalog.save_product(Product(id="B", name="B", stock=40))
        assert keeper.reports.dashboard_stats().low_stock_count == 1


class TestPartyStatement:
    def test_statement(self, keeper, product, customer):
        keeper.invoices.create(_invoice("C1", TransactionType.SALE, 1, 100, received=100))
        keeper.invoices.create(_invoice("C1", TransactionType.SALE, 2, 100, received=50))
        keeper.cashbook.record(CashTransaction(id="", type=CashType.IN, amount=25, party_id="C1"))

        statement = keeper.reports.party_statement("C1")

        assert statement.party.balance == 125
        assert len(statement.invoices) == 2
        assert len(statement.cash_transactions) == 3
        assert sum(1 for t in statement.cash_transactions if t.locked) == 2
        assert statement.total_billed == 300
        assert statement.total_paid == 150
        assert statement.total_due == 150
        assert statement.last_transaction is not None

    def test_unknown_party(self, keeper):
        assert keeper.reports.party_statement("nope") is None


class TestDailyCash:
    def test_daily_totals_and_profit(self, keeper, customer):
        keeper.catalog.save_product(Product(id="P", name="P", price=100, cost=60, stock=50))
        keeper.invoices.create(_invoice("C1", TransactionType.SALE, 2, 100, received=200))
        keeper.cashbook.record(CashTransaction(id="", type=CashType.OUT, amount=30, category="Rent"))

        stats = keeper.reports.daily_cash_stats()

        assert stats.day == date.today()
        assert stats.cash_in == 200
        assert stats.cash_out == 30
        assert stats.net_cash == 170
        assert stats.gross_profit == 80
        assert stats.transaction_count == 2

    def test_other_day_is_empty(self, keeper):
        keeper.cashbook.record(CashTransaction(id="", type=CashType.IN, amount=10))
        stats = keeper.reports.daily_cash_stats(date(2001, 1, 1))
        assert stats.cash_in == 0
        assert stats.transaction_count == 0


class TestMonthlySummary:
    def test_buckets_by_month(self, keeper, product, customer):
        keeper.invoices.create(
            _invoice("C1", TransactionType.SALE, 1, 100, received=100, when=datetime(2024, 3, 5, 10))
        )
        keeper.invoices.create(
            _invoice("C1", TransactionType.SALE, 2, 100, when=datetime(2024, 5, 20, 10))
        )
        keeper.invoices.create(
            _invoice("C1", TransactionType.SALE, 1, 100, when=datetime(2023, 1, 1, 10))
        )

        rows = keeper.reports.monthly_summary(months=3, today=date(2024, 5, 31))

        assert [r.month for r in rows] == ["2024-03", "2024-04", "2024-05"]
        assert [r.sales for r in rows] == [100, 0, 200]
        assert rows[0].cash_in == 100
        assert rows[2].cash_in == 0


class TestStockReports:
    def test_low_stock_sorted(self, keeper):
        keeper.catalog.save_product(Product(id="A", name="A", stock=5))
        keeper.catalog.save_product(Product(id="B", name="B", stock=0))
        keeper.catalog.save_product(Product(id="C", name="C", stock=50))

        alerts = keeper.reports.low_stock()

        assert [a.product_id for a in alerts] == ["B", "A"]
        assert [a.level for a in alerts] == ["OUT_OF_STOCK", "LOW"]

    def test_reconciliation_flags_drift(self, keeper, store):
        keeper.catalog.save_product(Product(id="P", name="P", stock=5))
        # simulate a write that bypassed the ledger
        raw = store.products.get("P")
        raw.stock = 7
        store.products.upsert(raw)

        [row] = keeper.reports.stock_reconciliation()
        assert row.ledger_total == 5
        assert row.drift == 2
