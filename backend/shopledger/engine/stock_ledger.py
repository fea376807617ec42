"""
Stock ledger: append-only log of stock movements.

Every change to ``Product.stock`` goes through ``StockLedger.move`` so the
ledger always explains the cached stock level:

    product.stock == Σ StockTransaction.quantity for that product

(the opening stock is itself logged as an OPENING movement).

Sign convention per movement type:
    OPENING +   PURCHASE +   SALE −      RETURN_IN +
    RETURN_OUT − DAMAGE −    TRANSFER −  ADJUSTMENT ± (caller decides)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger

from shopledger.core.config import settings
from shopledger.models import Product, StockMovementType, StockTransaction
from shopledger.models.base import new_id, qty
from shopledger.store.base import RecordStore

MOVEMENT_SIGN: dict[StockMovementType, int] = {
    StockMovementType.OPENING: 1,
    StockMovementType.PURCHASE: 1,
    StockMovementType.SALE: -1,
    StockMovementType.RETURN_IN: 1,
    StockMovementType.RETURN_OUT: -1,
    StockMovementType.DAMAGE: -1,
    StockMovementType.ADJUSTMENT: 0,
    StockMovementType.TRANSFER: -1,
}


def signed_quantity(movement: StockMovementType, quantity: float) -> float:
    """Apply the movement's sign to a quantity; ADJUSTMENT keeps the caller's sign."""
    sign = MOVEMENT_SIGN[movement]
    if sign == 0:
        return qty(quantity)
    return qty(sign * abs(quantity))


def reorder_level(product: Product) -> float:
    if product.reorder_level is None:
        return settings.DEFAULT_REORDER_LEVEL
    return product.reorder_level


def stock_status(product: Product) -> str:
    if product.stock <= 0:
        return "Out of Stock"
    if product.stock <= reorder_level(product):
        return "Low"
    return "Available"


@dataclass
class StockAlert:
    product_id: str
    product_name: str
    stock: float
    reorder_level: float
    level: str  # NEGATIVE | OUT_OF_STOCK | LOW


def stock_alert(product: Product) -> Optional[StockAlert]:
    """Structured low-stock signal. Never blocks the movement that caused it."""
    threshold = reorder_level(product)
    if product.stock < 0:
        level = "NEGATIVE"
    elif product.stock == 0:
        level = "OUT_OF_STOCK"
    elif product.stock <= threshold:
        level = "LOW"
    else:
        return None
    return StockAlert(
        product_id=product.id,
        product_name=product.name,
        stock=product.stock,
        reorder_level=threshold,
        level=level,
    )


class StockLedger:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def record_movement(
        self,
        product_id: str,
        movement: StockMovementType,
        quantity: float,
        previous_stock: float,
        new_stock: float,
        note: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> StockTransaction:
        entry = StockTransaction(
            id=new_id("STK"),
            product_id=product_id,
            date=datetime.now(),
            type=movement,
            quantity=qty(quantity),
            previous_stock=qty(previous_stock),
            new_stock=qty(new_stock),
            note=note,
            reference_id=reference_id,
        )
        self.store.stock_history.upsert(entry)
        return entry

    def query_history(self, product_id: Optional[str] = None) -> list[StockTransaction]:
        """Movements newest first; ties keep reverse insertion order."""
        entries = [
            (i, e)
            for i, e in enumerate(self.store.stock_history.all())
            if product_id is None or e.product_id == product_id
        ]
        entries.sort(key=lambda pair: (pair[1].date, pair[0]), reverse=True)
        return [e for _, e in entries]

    def move(
        self,
        product: Product,
        movement: StockMovementType,
        quantity: float,
        note: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> StockTransaction:
        """Change ``product.stock`` by a signed quantity, persist it and log the movement."""
        with self.store.unit_of_work():
            previous = product.stock
            product.stock = qty(previous + quantity)
            self.store.products.upsert(product)
            entry = self.record_movement(
                product.id,
                movement,
                quantity,
                previous,
                product.stock,
                note=note,
                reference_id=reference_id,
            )
        logger.debug(
            f"Stock {movement.value} {product.id}: {previous} → {product.stock} ({quantity:+})"
        )
        return entry

    def ledger_total(self, product_id: str) -> float:
        return qty(
            sum(e.quantity for e in self.store.stock_history.all() if e.product_id == product_id)
        )
