"""
General REST API routes for the ShopLedger backend.

Endpoints:
  GET  /api/health
  GET  /api/dashboard
  GET  /api/reports/monthly
  GET  /api/business
  PUT  /api/business
  GET  /api/backup
  POST /api/backup/restore
  GET  /api/export/invoices.csv
"""
from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse
from loguru import logger
from sqlmodel import Session, select

from shopledger.core.database import get_bookkeeper, get_session
from shopledger.core.errors import MalformedSnapshot
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.models import BusinessInfo, TransactionType
from shopledger.models.store import StoredRecord
from shopledger.schemas.responses import (
    DashboardStats,
    HealthResponse,
    MonthlySummary,
    RestoreResponse,
)

router = APIRouter(prefix="/api")


# ── Health ────────────────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
def health(session: Session = Depends(get_session)):
    try:
        session.exec(select(StoredRecord).limit(1))
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {e}"
    return HealthResponse(status="ok", db=db_status)


# ── Reports ───────────────────────────────────────────────────────────────────


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(keeper: Bookkeeper = Depends(get_bookkeeper)):
    return keeper.reports.dashboard_stats()


@router.get("/reports/monthly", response_model=list[MonthlySummary])
def monthly_report(
    months: int = Query(default=6, ge=1, le=36),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    """Invoice and cash totals per month, oldest month first."""
    return keeper.reports.monthly_summary(months)


# ── Business profile ──────────────────────────────────────────────────────────


@router.get("/business", response_model=BusinessInfo)
def get_business(keeper: Bookkeeper = Depends(get_bookkeeper)):
    return keeper.catalog.business_info()


@router.put("/business", response_model=BusinessInfo)
def save_business(body: BusinessInfo, keeper: Bookkeeper = Depends(get_bookkeeper)):
    info = keeper.catalog.save_business_info(body)
    logger.info(f"Business profile saved: {info.name}")
    return info


# ── Backup ────────────────────────────────────────────────────────────────────


@router.get("/backup")
def download_backup(keeper: Bookkeeper = Depends(get_bookkeeper)):
    """Download the whole store as one JSON snapshot."""
    snapshot = keeper.backup.export_snapshot()
    filename = f"shopledger_backup_{datetime.now():%Y%m%d_%H%M%S}.json"
    return StreamingResponse(
        iter([json.dumps(snapshot, indent=2)]),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/backup/restore", response_model=RestoreResponse)
async def restore_backup(
    file: UploadFile = File(...),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    """
    Restore a snapshot produced by GET /api/backup.
    Collections present in the file are replaced; nothing is written if
    any part of it fails validation.
    """
    content = await file.read()
    try:
        restored = keeper.backup.restore(content)
    except MalformedSnapshot as exc:
        logger.error(f"Restore of {file.filename} rejected: {exc}")
        raise HTTPException(status_code=400, detail=f"Invalid backup file: {exc}")
    return RestoreResponse(status="restored", collections=restored)


# ── Export ────────────────────────────────────────────────────────────────────


@router.get("/export/invoices.csv")
def export_invoices_csv(
    invoice_type: Optional[TransactionType] = Query(default=None, alias="type"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    """Download a CSV of invoices matching filters."""
    invoices = keeper.invoices.list(invoice_type=invoice_type)
    if date_from:
        invoices = [inv for inv in invoices if inv.date.date() >= date_from]
    if date_to:
        invoices = [inv for inv in invoices if inv.date.date() <= date_to]

    output = io.StringIO()
    writer = csv.DictWriter(
        output,
        fieldnames=[
            "id", "date", "type", "party_id", "party_name", "items",
            "subtotal", "discount", "total_amount", "received_amount",
            "due_amount", "status",
        ],
    )
    writer.writeheader()
    for inv in invoices:
        writer.writerow({
            "id": inv.id,
            "date": inv.date.strftime("%Y-%m-%d %H:%M"),
            "type": inv.type.value,
            "party_id": inv.party_id,
            "party_name": inv.party_name,
            "items": len(inv.items),
            "subtotal": inv.subtotal,
            "discount": inv.discount,
            "total_amount": inv.total_amount,
            "received_amount": inv.received_amount,
            "due_amount": inv.due_amount,
            "status": inv.status.value,
        })

    output.seek(0)
    label = invoice_type.value.lower() if invoice_type else "all"
    filename = f"invoices_{label}_{date.today()}.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
