from shopledger.store.base import COLLECTIONS, RecordStore, Repository
from shopledger.store.memory import MemoryRecordStore
from shopledger.store.sql import SqlRecordStore

__all__ = [
    "COLLECTIONS",
    "RecordStore",
    "Repository",
    "MemoryRecordStore",
    "SqlRecordStore",
]
