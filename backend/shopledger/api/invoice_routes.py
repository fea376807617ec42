"""
Invoice API routes.

Endpoints:
  GET    /api/invoices                  – list, newest first (filter by type / party)
  GET    /api/invoices/{id}             – one invoice
  POST   /api/invoices                  – create; books stock, balance and cash
  PUT    /api/invoices/{id}             – full revert + reapply
  DELETE /api/invoices/{id}             – revert effects and remove
  POST   /api/invoices/{id}/payments    – record an additional payment

Write endpoints return the invoice together with any warnings and stock
alerts raised while booking it. Alerts never block the save.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from shopledger.core.database import get_bookkeeper
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.engine.invoices import InvoiceOutcome
from shopledger.models import Invoice, InvoiceItem, TransactionType
from shopledger.schemas.responses import InvoiceOutcomeRead, StockAlertRead

invoice_router = APIRouter(prefix="/api/invoices", tags=["invoices"])

# ── Pydantic schemas ──────────────────────────────────────────────────────────


class InvoiceItemIn(BaseModel):
    product_id: str = Field(min_length=1)
    product_name: str = ""
    quantity: float = Field(gt=0)
    price: float = Field(ge=0)
    discount: float = Field(default=0.0, ge=0)


class InvoiceIn(BaseModel):
    id: str = ""
    date: Optional[datetime] = None
    party_id: str = ""
    party_name: str = ""
    type: TransactionType = TransactionType.SALE
    items: list[InvoiceItemIn]
    discount: float = Field(default=0.0, ge=0)
    received_amount: float = Field(default=0.0, ge=0)

    @field_validator("items")
    @classmethod
    def at_least_one_item(cls, v: list[InvoiceItemIn]) -> list[InvoiceItemIn]:
        if not v:
            raise ValueError("invoice needs at least one item")
        return v

    def to_invoice(self) -> Invoice:
        data = self.model_dump(exclude={"items", "date"})
        invoice = Invoice(**data, items=[InvoiceItem(**i.model_dump()) for i in self.items])
        if self.date:
            invoice.date = self.date
        return invoice


class PaymentIn(BaseModel):
    amount: float = Field(gt=0)
    date: Optional[datetime] = None
    note: Optional[str] = None


# ── Helpers ───────────────────────────────────────────────────────────────────


def _outcome_read(outcome: InvoiceOutcome) -> InvoiceOutcomeRead:
    return InvoiceOutcomeRead(
        invoice=outcome.invoice,
        warnings=outcome.warnings,
        alerts=[StockAlertRead.model_validate(a) for a in outcome.alerts],
    )


# ── Endpoints ─────────────────────────────────────────────────────────────────


@invoice_router.get("", response_model=list[Invoice])
def list_invoices(
    type: Optional[TransactionType] = Query(default=None),
    party_id: Optional[str] = Query(default=None),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    return keeper.invoices.list(invoice_type=type, party_id=party_id)


@invoice_router.get("/{invoice_id}", response_model=Invoice)
def get_invoice(invoice_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    invoice = keeper.invoices.get(invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@invoice_router.post("", response_model=InvoiceOutcomeRead)
def create_invoice(body: InvoiceIn, keeper: Bookkeeper = Depends(get_bookkeeper)):
    return _outcome_read(keeper.invoices.create(body.to_invoice()))


@invoice_router.put("/{invoice_id}", response_model=InvoiceOutcomeRead)
def update_invoice(
    invoice_id: str,
    body: InvoiceIn,
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    outcome = keeper.invoices.update(invoice_id, body.to_invoice())
    if outcome is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return _outcome_read(outcome)


@invoice_router.delete("/{invoice_id}", response_model=InvoiceOutcomeRead)
def delete_invoice(invoice_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    outcome = keeper.invoices.delete(invoice_id)
    if outcome is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return _outcome_read(outcome)


@invoice_router.post("/{invoice_id}/payments", response_model=InvoiceOutcomeRead)
def add_payment(
    invoice_id: str,
    body: PaymentIn,
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    outcome = keeper.invoices.add_payment(invoice_id, body.amount, body.date, body.note)
    if outcome is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return _outcome_read(outcome)
