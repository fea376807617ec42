"""Pydantic response schemas for API endpoints and report results."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel

from shopledger.models import (
    CashType,
    Invoice,
    Party,
    Product,
    StockTransaction,
)


class HealthResponse(BaseModel):
    status: str
    db: str
    version: str = "1.0.0"


class StockAlertRead(BaseModel):
    product_id: str
    product_name: str
    stock: float
    reorder_level: float
    level: str  # NEGATIVE | OUT_OF_STOCK | LOW

    class Config:
        from_attributes = True


class ProductRead(Product):
    status: str  # "Available", "Low", "Out of Stock"


class StockAdjustmentResponse(BaseModel):
    entry: StockTransaction
    product: Product
    alert: Optional[StockAlertRead] = None


class InvoiceOutcomeRead(BaseModel):
    invoice: Invoice
    warnings: list[str] = []
    alerts: list[StockAlertRead] = []


class CashTransactionRead(BaseModel):
    id: str
    date: datetime
    type: CashType
    amount: float
    category: str
    description: Optional[str]
    party_id: Optional[str]
    party_name: Optional[str]
    linked_invoice_id: Optional[str]
    locked: bool  # owned by an invoice, no delete action

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    total_sales: float  # net of sale returns
    total_purchases: float  # net of purchase returns
    total_receivable: float
    total_payable: float
    net_profit: float
    invoice_count: int
    product_count: int
    low_stock_count: int


class PartyStatement(BaseModel):
    party: Party
    invoices: list[Invoice]
    cash_transactions: list[CashTransactionRead]
    total_billed: float
    total_paid: float
    total_due: float
    last_transaction: Optional[datetime]


class DailyCashStats(BaseModel):
    day: date
    cash_in: float
    cash_out: float
    net_cash: float
    gross_profit: float  # from that day's sale invoices
    transaction_count: int


class MonthlySummary(BaseModel):
    month: str  # "YYYY-MM"
    sales: float
    purchases: float
    sale_returns: float
    purchase_returns: float
    cash_in: float
    cash_out: float


class StockReconciliationRow(BaseModel):
    product_id: str
    product_name: str
    stock: float
    ledger_total: float
    drift: float  # stock − ledger_total, 0 when consistent


class RestoreResponse(BaseModel):
    status: str
    collections: list[str]
