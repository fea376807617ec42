"""
Cashbook API routes.

Endpoints:
  GET    /api/cashbook           – entries newest first (filter by day / type / party)
  POST   /api/cashbook           – record or update a manual entry
  DELETE /api/cashbook/{id}      – delete; 409 when the entry belongs to an invoice
  GET    /api/cashbook/daily     – cash in/out and gross profit for one day
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from shopledger.core.database import get_bookkeeper
from shopledger.core.errors import LockedEntryError
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.engine.reporting import cash_read
from shopledger.models import CashTransaction, CashType
from shopledger.schemas.responses import CashTransactionRead, DailyCashStats

cash_router = APIRouter(prefix="/api/cashbook", tags=["cashbook"])

# ── Pydantic schemas ──────────────────────────────────────────────────────────


class CashIn(BaseModel):
    id: str = ""
    date: Optional[datetime] = None
    type: CashType
    amount: float = Field(gt=0)
    category: str = "General"
    description: Optional[str] = None
    party_id: Optional[str] = None


# ── Endpoints ─────────────────────────────────────────────────────────────────


@cash_router.get("", response_model=list[CashTransactionRead])
def list_cash(
    day: Optional[date] = Query(default=None),
    type: Optional[CashType] = Query(default=None),
    party_id: Optional[str] = Query(default=None),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    return [cash_read(t) for t in keeper.cashbook.list(day, type, party_id)]


@cash_router.get("/daily", response_model=DailyCashStats)
def daily_stats(
    day: Optional[date] = Query(default=None, description="Defaults to today"),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    return keeper.reports.daily_cash_stats(day)


@cash_router.post("", response_model=CashTransactionRead)
def record_cash(body: CashIn, keeper: Bookkeeper = Depends(get_bookkeeper)):
    existing = keeper.cashbook.get(body.id) if body.id else None
    if existing and existing.locked:
        raise HTTPException(
            status_code=409,
            detail=f"Entry {body.id} belongs to invoice {existing.linked_invoice_id}",
        )
    tx = CashTransaction(**body.model_dump(exclude={"date"}))
    if body.date:
        tx.date = body.date
    return cash_read(keeper.cashbook.record(tx))


@cash_router.delete("/{transaction_id}")
def delete_cash(transaction_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)) -> dict:
    try:
        deleted = keeper.cashbook.delete(transaction_id)
    except LockedEntryError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    if not deleted:
        raise HTTPException(status_code=404, detail="Cash entry not found")
    return {"status": "deleted", "id": transaction_id}
