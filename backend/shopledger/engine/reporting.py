"""
Read-only aggregations over the record store.

Nothing here is cached or persisted; every figure is recomputed from the
collections at call time.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from shopledger.engine.stock_ledger import stock_alert
from shopledger.models import CashType, TransactionType
from shopledger.models.base import money, qty
from shopledger.schemas.responses import (
    CashTransactionRead,
    DailyCashStats,
    DashboardStats,
    MonthlySummary,
    PartyStatement,
    StockAlertRead,
    StockReconciliationRow,
)
from shopledger.store.base import RecordStore


def cash_read(tx) -> CashTransactionRead:
    return CashTransactionRead(**tx.model_dump(), locked=tx.locked)


class Reporting:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def dashboard_stats(self) -> DashboardStats:
        totals = {t: 0.0 for t in TransactionType}
        invoices = self.store.invoices.all()
        for inv in invoices:
            totals[inv.type] += inv.total_amount

        receivable = payable = 0.0
        for party in self.store.parties.all():
            if party.balance > 0:
                receivable += party.balance
            elif party.balance < 0:
                payable += abs(party.balance)

        products = self.store.products.all()
        net_sales = totals[TransactionType.SALE] - totals[TransactionType.SALE_RETURN]
        net_purchases = totals[TransactionType.PURCHASE] - totals[TransactionType.PURCHASE_RETURN]
        return DashboardStats(
            total_sales=money(net_sales),
            total_purchases=money(net_purchases),
            total_receivable=money(receivable),
            total_payable=money(payable),
            net_profit=money(net_sales - net_purchases),
            invoice_count=len(invoices),
            product_count=len(products),
            low_stock_count=sum(1 for p in products if stock_alert(p)),
        )

    def party_statement(self, party_id: str) -> Optional[PartyStatement]:
        party = self.store.parties.get(party_id)
        if party is None:
            return None

        invoices = sorted(
            (inv for inv in self.store.invoices.all() if inv.party_id == party_id),
            key=lambda inv: inv.date,
            reverse=True,
        )
        cash = sorted(
            (t for t in self.store.cashbook.all() if t.party_id == party_id),
            key=lambda t: t.date,
            reverse=True,
        )
        dates = [inv.date for inv in invoices[:1]] + [t.date for t in cash[:1]]
        return PartyStatement(
            party=party,
            invoices=invoices,
            cash_transactions=[cash_read(t) for t in cash],
            total_billed=money(sum(inv.total_amount for inv in invoices)),
            total_paid=money(sum(inv.received_amount for inv in invoices)),
            total_due=money(sum(inv.due_amount for inv in invoices)),
            last_transaction=max(dates) if dates else None,
        )

    def daily_cash_stats(self, day: Optional[date] = None) -> DailyCashStats:
        day = day or datetime.now().date()
        todays = [t for t in self.store.cashbook.all() if t.date.date() == day]
        cash_in = sum(t.amount for t in todays if t.type == CashType.IN)
        cash_out = sum(t.amount for t in todays if t.type == CashType.OUT)

        # Gross profit: line revenue minus current unit cost, less invoice discount
        products = {p.id: p for p in self.store.products.all()}
        gross_profit = 0.0
        for inv in self.store.invoices.all():
            if inv.type != TransactionType.SALE or inv.date.date() != day:
                continue
            for item in inv.items:
                product = products.get(item.product_id)
                if product:
                    gross_profit += item.total - product.cost * item.quantity
            gross_profit -= inv.discount

        return DailyCashStats(
            day=day,
            cash_in=money(cash_in),
            cash_out=money(cash_out),
            net_cash=money(cash_in - cash_out),
            gross_profit=money(gross_profit),
            transaction_count=len(todays),
        )

    def monthly_summary(self, months: int = 6, today: Optional[date] = None) -> list[MonthlySummary]:
        """Per-month invoice and cash totals for the last N months, oldest first."""
        today = today or datetime.now().date()
        start = (today - relativedelta(months=months - 1)).replace(day=1)

        result: dict[str, MonthlySummary] = {}
        current = start
        while current <= today:
            key = current.strftime("%Y-%m")
            result[key] = MonthlySummary(
                month=key, sales=0, purchases=0, sale_returns=0,
                purchase_returns=0, cash_in=0, cash_out=0,
            )
            current += relativedelta(months=1)

        field_for = {
            TransactionType.SALE: "sales",
            TransactionType.PURCHASE: "purchases",
            TransactionType.SALE_RETURN: "sale_returns",
            TransactionType.PURCHASE_RETURN: "purchase_returns",
        }
        for inv in self.store.invoices.all():
            row = result.get(inv.date.strftime("%Y-%m"))
            if row:
                field = field_for[inv.type]
                setattr(row, field, money(getattr(row, field) + inv.total_amount))

        for tx in self.store.cashbook.all():
            row = result.get(tx.date.strftime("%Y-%m"))
            if row:
                field = "cash_in" if tx.type == CashType.IN else "cash_out"
                setattr(row, field, money(getattr(row, field) + tx.amount))

        return list(result.values())

    def low_stock(self) -> list[StockAlertRead]:
        alerts = [stock_alert(p) for p in self.store.products.all()]
        return [
            StockAlertRead.model_validate(a)
            for a in sorted((a for a in alerts if a), key=lambda a: a.stock)
        ]

    def stock_reconciliation(self) -> list[StockReconciliationRow]:
        """Compare each product's cached stock with the sum of its ledger entries."""
        sums: dict[str, float] = {}
        for entry in self.store.stock_history.all():
            sums[entry.product_id] = sums.get(entry.product_id, 0.0) + entry.quantity

        rows = []
        for product in self.store.products.all():
            ledger_total = qty(sums.get(product.id, 0.0))
            rows.append(
                StockReconciliationRow(
                    product_id=product.id,
                    product_name=product.name,
                    stock=product.stock,
                    ledger_total=ledger_total,
                    drift=qty(product.stock - ledger_total),
                )
            )
        return rows
