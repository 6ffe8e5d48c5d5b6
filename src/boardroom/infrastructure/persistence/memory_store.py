"""In-process RecordStore used by tests and when no audit path is configured."""

import copy
import uuid
from typing import Any


def matches(record: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    return all(record.get(k) == v for k, v in (filters or {}).items())


class InMemoryRecordStore:
    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(record)
        stored.setdefault("id", uuid.uuid4().hex)
        self._tables.setdefault(table, {})[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def select(
        self, table: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        rows = self._tables.get(table, {}).values()
        return [copy.deepcopy(r) for r in rows if matches(r, filters)]

    async def update(
        self, table: str, record_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        record = self._tables.get(table, {}).get(record_id)
        if record is None:
            return None
        record.update(copy.deepcopy(changes))
        record["id"] = record_id
        return copy.deepcopy(record)

    async def delete(self, table: str, record_id: str) -> bool:
        return self._tables.get(table, {}).pop(record_id, None) is not None
