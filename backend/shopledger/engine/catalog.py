"""
Products, parties and the business profile.

Deletes never cascade: invoices keep the denormalized product/party names
so history stays readable after the record is gone.
"""
from __future__ import annotations

from typing import Optional

from loguru import logger

from shopledger.core.config import settings
from shopledger.engine.stock_ledger import StockAlert, StockLedger, signed_quantity, stock_alert
from shopledger.models import (
    BusinessInfo,
    Party,
    PartyType,
    Product,
    StockMovementType,
    StockTransaction,
)
from shopledger.models.base import new_id, qty
from shopledger.store.base import BUSINESS_INFO_KEY, RecordStore

DEMO_PRODUCTS = [
    dict(id="PROD-001", name="Original Display (iPhone 11)", sku="DISP-I11",
         category="Display", price=4500, cost=3200, stock=15, unit="pc"),
    dict(id="PROD-002", name="Premium Battery (iPhone X)", sku="BATT-IX",
         category="Battery", price=1800, cost=1100, stock=25, unit="pc"),
    dict(id="PROD-003", name="Fast Charger 20W", sku="CHRG-20W",
         category="Accessories", price=950, cost=450, stock=50, unit="pc"),
]


def _matches(text: Optional[str], term: str) -> bool:
    return bool(text) and term in text.lower()


class Catalog:
    def __init__(self, store: RecordStore, stock: StockLedger) -> None:
        self.store = store
        self.stock = stock

    # ── products ─────────────────────────────────────────────────────────────

    def products(self, search: Optional[str] = None) -> list[Product]:
        items = self.store.products.all()
        if search:
            term = search.lower()
            items = [
                p for p in items
                if _matches(p.name, term) or _matches(p.sku, term) or _matches(p.barcode, term)
            ]
        return items

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.store.products.get(product_id)

    def find_product(self, code: str) -> Optional[Product]:
        """Look a product up by id, SKU or barcode (scanner input)."""
        product = self.store.products.get(code)
        if product:
            return product
        return next(
            (p for p in self.store.products.all() if code in (p.sku, p.barcode)),
            None,
        )

    def save_product(self, product: Product) -> Product:
        """
        Create or update a product.

        Stock never changes silently: a new product's stock is logged as an
        OPENING movement, and an edit that changes the stock figure is
        logged as an ADJUSTMENT.
        """
        with self.store.unit_of_work():
            if not product.id:
                product.id = new_id("PROD")
            requested = qty(product.stock)
            existing = self.store.products.get(product.id)

            if existing is None:
                product.stock = 0.0
                product.opening_stock = requested
                if requested:
                    self.stock.move(
                        product, StockMovementType.OPENING, requested, note="Opening stock"
                    )
                else:
                    self.store.products.upsert(product)
                logger.info(f"Product created: {product.id} {product.name} stock={requested}")
                return product

            product.stock = existing.stock
            product.opening_stock = existing.opening_stock
            difference = qty(requested - existing.stock)
            if difference:
                self.stock.move(
                    product, StockMovementType.ADJUSTMENT, difference, note="Manual edit"
                )
            else:
                self.store.products.upsert(product)
        logger.info(f"Product updated: {product.id} {product.name}")
        return product

    def delete_product(self, product_id: str) -> bool:
        deleted = self.store.products.delete(product_id)
        if deleted:
            logger.info(f"Product deleted: {product_id}")
        return deleted

    def adjust_stock(
        self,
        product_id: str,
        movement: StockMovementType,
        quantity: float,
        note: Optional[str] = None,
    ) -> Optional[tuple[StockTransaction, Optional[StockAlert]]]:
        """Manual stock movement; the type decides the sign except for ADJUSTMENT."""
        with self.store.unit_of_work():
            product = self.store.products.get(product_id)
            if product is None:
                logger.info(f"Stock adjustment ignored, product {product_id} not found")
                return None
            entry = self.stock.move(product, movement, signed_quantity(movement, quantity), note=note)
        alert = stock_alert(product)
        if alert:
            logger.warning(f"Stock {alert.level} for {product.id}: {product.stock}")
        return entry, alert

    # ── parties ──────────────────────────────────────────────────────────────

    def parties(self, party_type: Optional[PartyType] = None, search: Optional[str] = None) -> list[Party]:
        items = self.store.parties.all()
        if party_type:
            items = [p for p in items if p.type == party_type]
        if search:
            term = search.lower()
            items = [
                p for p in items
                if _matches(p.name, term) or term in (p.phone or "") or _matches(p.email, term)
            ]
        return items

    def get_party(self, party_id: str) -> Optional[Party]:
        return self.store.parties.get(party_id)

    def save_party(self, party: Party) -> Party:
        """Create or update a party. Balance only moves through invoices and cash."""
        with self.store.unit_of_work():
            if not party.id:
                party.id = new_id("PARTY")
            existing = self.store.parties.get(party.id)
            party.balance = existing.balance if existing else 0.0
            self.store.parties.upsert(party)
        logger.info(f"Party {'updated' if existing else 'created'}: {party.id} {party.name}")
        return party

    def delete_party(self, party_id: str) -> bool:
        deleted = self.store.parties.delete(party_id)
        if deleted:
            logger.info(f"Party deleted: {party_id}")
        return deleted

    # ── business profile ─────────────────────────────────────────────────────

    def business_info(self) -> BusinessInfo:
        return self.store.business_info.get(BUSINESS_INFO_KEY) or BusinessInfo()

    def save_business_info(self, info: BusinessInfo) -> BusinessInfo:
        return self.store.business_info.upsert(info)

    # ── defaults ─────────────────────────────────────────────────────────────

    def seed_defaults(self) -> None:
        """Demo products and the walk-in party, only into empty collections."""
        with self.store.unit_of_work():
            if not self.store.products.all():
                for data in DEMO_PRODUCTS:
                    self.save_product(Product(**data))
                logger.info(f"Seeded {len(DEMO_PRODUCTS)} demo products")
            if not self.store.parties.all():
                self.save_party(
                    Party(
                        id=settings.WALK_IN_PARTY_ID,
                        name="Walk-in Customer",
                        phone="0000",
                        type=PartyType.CUSTOMER,
                    )
                )
                logger.info("Seeded walk-in party")
