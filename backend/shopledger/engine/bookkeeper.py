"""Wires the ledger components over one record store."""
from __future__ import annotations

from shopledger.engine.backup import Backup
from shopledger.engine.cashbook import Cashbook
from shopledger.engine.catalog import Catalog
from shopledger.engine.invoices import InvoiceEngine
from shopledger.engine.party_ledger import PartyLedger
from shopledger.engine.reporting import Reporting
from shopledger.engine.stock_ledger import StockLedger
from shopledger.store.base import RecordStore


class Bookkeeper:
    """Entry point for every read and write the API performs."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self.stock = StockLedger(store)
        self.parties = PartyLedger(store)
        self.cashbook = Cashbook(store, self.parties)
        self.invoices = InvoiceEngine(store, self.stock, self.parties, self.cashbook)
        self.catalog = Catalog(store, self.stock)
        self.reports = Reporting(store)
        self.backup = Backup(store)
