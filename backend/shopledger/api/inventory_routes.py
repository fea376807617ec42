"""
Inventory API routes: products and the stock ledger.

Endpoints:
  GET    /api/products                  – list (optional search by name/SKU/barcode)
  GET    /api/products/lookup/{code}    – find by id, SKU or barcode
  GET    /api/products/{id}             – one product
  POST   /api/products                  – create or update
  DELETE /api/products/{id}             – delete (invoices keep their lines)
  POST   /api/products/{id}/adjust      – manual stock movement
  GET    /api/products/{id}/history     – stock movements, newest first
  GET    /api/stock/history             – all stock movements, newest first
  GET    /api/stock/low                 – low / out-of-stock / negative products
  GET    /api/stock/reconciliation      – cached stock vs ledger totals
  GET    /api/export/stock.xlsx         – stock report workbook
"""
from __future__ import annotations

import io
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, model_validator

from shopledger.core.database import get_bookkeeper
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.engine.stock_ledger import reorder_level, stock_status
from shopledger.models import Product, StockMovementType, StockTransaction
from shopledger.schemas.responses import (
    ProductRead,
    StockAdjustmentResponse,
    StockAlertRead,
    StockReconciliationRow,
)

inventory_router = APIRouter(prefix="/api", tags=["inventory"])

# ── Pydantic schemas ──────────────────────────────────────────────────────────


class ProductIn(BaseModel):
    id: str = ""  # empty → new id
    name: str = Field(min_length=1)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    cost: float = Field(default=0.0, ge=0)
    stock: float = Field(default=0.0, ge=0)
    unit: str = "pc"
    reorder_level: Optional[float] = Field(default=None, ge=0)
    discount: float = Field(default=0.0, ge=0)
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None


class StockAdjustIn(BaseModel):
    type: StockMovementType
    quantity: float
    note: Optional[str] = None

    @model_validator(mode="after")
    def quantity_sign(self) -> "StockAdjustIn":
        if self.quantity == 0:
            raise ValueError("quantity must be non-zero")
        if self.type != StockMovementType.ADJUSTMENT and self.quantity < 0:
            raise ValueError("quantity must be positive; only ADJUSTMENT takes a sign")
        return self


# ── Helpers ───────────────────────────────────────────────────────────────────


def _product_read(product: Product) -> ProductRead:
    return ProductRead(**product.model_dump(), status=stock_status(product))


# ── Products ──────────────────────────────────────────────────────────────────


@inventory_router.get("/products", response_model=list[ProductRead])
def list_products(
    search: Optional[str] = Query(default=None, description="Name, SKU or barcode"),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    return [_product_read(p) for p in keeper.catalog.products(search)]


@inventory_router.get("/products/lookup/{code}", response_model=ProductRead)
def lookup_product(code: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    product = keeper.catalog.find_product(code)
    if not product:
        raise HTTPException(status_code=404, detail=f"No product for code {code}")
    return _product_read(product)


@inventory_router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    product = keeper.catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return _product_read(product)


@inventory_router.post("/products", response_model=ProductRead)
def save_product(body: ProductIn, keeper: Bookkeeper = Depends(get_bookkeeper)):
    product = keeper.catalog.save_product(Product(**body.model_dump()))
    return _product_read(product)


@inventory_router.delete("/products/{product_id}")
def delete_product(product_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)) -> dict:
    if not keeper.catalog.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"status": "deleted", "id": product_id}


# ── Stock ledger ──────────────────────────────────────────────────────────────


@inventory_router.post("/products/{product_id}/adjust", response_model=StockAdjustmentResponse)
def adjust_stock(
    product_id: str,
    body: StockAdjustIn,
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    result = keeper.catalog.adjust_stock(product_id, body.type, body.quantity, body.note)
    if result is None:
        raise HTTPException(status_code=404, detail="Product not found")
    entry, alert = result
    return StockAdjustmentResponse(
        entry=entry,
        product=keeper.catalog.get_product(product_id),
        alert=StockAlertRead.model_validate(alert) if alert else None,
    )


@inventory_router.get("/products/{product_id}/history", response_model=list[StockTransaction])
def product_history(product_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    return keeper.stock.query_history(product_id)


@inventory_router.get("/stock/history", response_model=list[StockTransaction])
def stock_history(
    limit: int = Query(default=200, ge=1, le=5000),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    return keeper.stock.query_history()[:limit]


@inventory_router.get("/stock/low", response_model=list[StockAlertRead])
def low_stock(keeper: Bookkeeper = Depends(get_bookkeeper)):
    return keeper.reports.low_stock()


@inventory_router.get("/stock/reconciliation", response_model=list[StockReconciliationRow])
def stock_reconciliation(
    drift_only: bool = Query(default=False),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    rows = keeper.reports.stock_reconciliation()
    if drift_only:
        rows = [r for r in rows if r.drift != 0]
    return rows


# ── Export ────────────────────────────────────────────────────────────────────


@inventory_router.get("/export/stock.xlsx")
def export_stock_excel(keeper: Bookkeeper = Depends(get_bookkeeper)):
    """Stock report: one sheet of products, one of recent movements."""
    try:
        import openpyxl
        from openpyxl.styles import Alignment, Font, PatternFill
        from openpyxl.utils import get_column_letter
    except ImportError:
        raise HTTPException(status_code=500, detail="openpyxl not installed")

    wb = openpyxl.Workbook()

    # ── Sheet 1: Stock ────────────────────────────────────────────────────────
    ws = wb.active
    ws.title = "Stock"

    header_fill = PatternFill(start_color="1F3864", end_color="1F3864", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=10)
    row_font = Font(size=10)
    center = Alignment(horizontal="center", vertical="center")
    low_fill = PatternFill(start_color="FCE4D6", end_color="FCE4D6", fill_type="solid")

    headers = [
        "Product ID", "Name", "SKU", "Category", "Stock", "Unit",
        "Reorder Level", "Status", "Unit Cost", "Stock Value",
    ]
    for col_idx, h in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_idx, value=h)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = center

    products = keeper.catalog.products()
    for row_idx, p in enumerate(products, 2):
        status = stock_status(p)
        data = [
            p.id,
            p.name,
            p.sku or "",
            p.category or "",
            round(p.stock, 3),
            p.unit,
            reorder_level(p),
            status,
            round(p.cost, 2),
            round(p.cost * p.stock, 2),
        ]
        for col_idx, val in enumerate(data, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=val)
            cell.font = row_font
            if status != "Available":
                cell.fill = low_fill

    # Auto column widths
    for col_idx in range(1, len(headers) + 1):
        col_letter = get_column_letter(col_idx)
        max_len = max(
            len(str(ws.cell(row=r, column=col_idx).value or ""))
            for r in range(1, len(products) + 2)
        )
        ws.column_dimensions[col_letter].width = min(max_len + 4, 45)

    # ── Sheet 2: Movements ────────────────────────────────────────────────────
    ws2 = wb.create_sheet("Movements")
    for col_idx, h in enumerate(
        ["Date", "Product ID", "Type", "Quantity", "Previous", "New", "Note", "Reference"], 1
    ):
        cell = ws2.cell(row=1, column=col_idx, value=h)
        cell.font = header_font
        cell.fill = header_fill

    for row_idx, e in enumerate(keeper.stock.query_history()[:1000], 2):
        for col_idx, val in enumerate(
            [
                e.date.strftime("%Y-%m-%d %H:%M"),
                e.product_id,
                e.type.value,
                e.quantity,
                e.previous_stock,
                e.new_stock,
                e.note or "",
                e.reference_id or "",
            ],
            1,
        ):
            ws2.cell(row=row_idx, column=col_idx, value=val)

    for col_idx, width in [(1, 18), (2, 22), (3, 12), (7, 40), (8, 28)]:
        ws2.column_dimensions[get_column_letter(col_idx)].width = width

    # Stream to client
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=stock_{date.today()}.xlsx"},
    )
