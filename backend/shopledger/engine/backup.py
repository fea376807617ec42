"""
Whole-store backup and restore.

Snapshot format (JSON):
    {
      "timestamp": "2024-05-01T10:00:00",
      "products": [...], "parties": [...], "invoices": [...],
      "stock_history": [...], "cashbook": [...],
      "business_info": {...}
    }

Restore is all-or-nothing: every collection present in the snapshot is
validated before anything is written. Collections missing from the
snapshot keep their current contents.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Union

from loguru import logger
from pydantic import ValidationError

from shopledger.core.errors import MalformedSnapshot
from shopledger.store.base import COLLECTIONS, RecordStore

SINGLETONS = {"business_info"}


class Backup:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def export_snapshot(self) -> dict[str, Any]:
        snapshot: dict[str, Any] = {"timestamp": datetime.now().isoformat()}
        for name, repo in self.store.repositories.items():
            records = [repo._dump(r) for r in repo.all()]
            if name in SINGLETONS:
                snapshot[name] = records[0] if records else None
            else:
                snapshot[name] = records
        logger.info(
            "Snapshot exported: "
            + ", ".join(f"{k}={len(v)}" for k, v in snapshot.items() if isinstance(v, list))
        )
        return snapshot

    def _parse(self, data: Union[str, bytes, dict]) -> dict[str, list]:
        """Validate a snapshot into {collection: [records]}; raises MalformedSnapshot."""
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError as exc:
                raise MalformedSnapshot(f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedSnapshot("snapshot must be a JSON object")

        parsed: dict[str, list] = {}
        for name, value in data.items():
            if name == "timestamp":
                continue
            if name not in COLLECTIONS:
                logger.info(f"Snapshot key '{name}' ignored")
                continue
            model, _ = COLLECTIONS[name]
            if name in SINGLETONS:
                value = [] if value is None else [value]
            if not isinstance(value, list):
                raise MalformedSnapshot(f"'{name}' must be a list")
            try:
                parsed[name] = [model.model_validate(v) for v in value]
            except ValidationError as exc:
                raise MalformedSnapshot(f"'{name}': {exc.error_count()} invalid record(s)") from exc
        return parsed

    def restore(self, data: Union[str, bytes, dict]) -> list[str]:
        """Overwrite the collections present in ``data`` and return their names."""
        parsed = self._parse(data)
        with self.store.unit_of_work():
            for name, records in parsed.items():
                self.store.repositories[name].replace_all(records)
        logger.info(f"Snapshot restored: {sorted(parsed)}")
        return sorted(parsed)

    def import_snapshot(self, data: Union[str, bytes, dict]) -> bool:
        """Boolean form of ``restore``: False, with the store untouched, on bad input."""
        try:
            self.restore(data)
        except MalformedSnapshot as exc:
            logger.error(f"Snapshot rejected: {exc}")
            return False
        return True
