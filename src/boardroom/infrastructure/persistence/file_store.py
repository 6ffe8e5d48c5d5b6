"""
File-backed RecordStore

Stores each table as one JSON document (``<table>.json``) under a directory.
Writes go to a temp file which is then renamed over the target, and every
table is guarded by its own asyncio.Lock.
"""

import asyncio
import json
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any

import aiofiles
import structlog

from boardroom.infrastructure.persistence.memory_store import matches


class FileRecordStore:
    def __init__(self, data_dir: str = ".boardroom"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.locks: dict[str, asyncio.Lock] = {}
        self.logger = structlog.get_logger().bind(component="file_record_store")

    def _get_lock(self, table: str) -> asyncio.Lock:
        if table not in self.locks:
            self.locks[table] = asyncio.Lock()
        return self.locks[table]

    def _table_path(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    async def _read(self, table: str) -> dict[str, dict[str, Any]]:
        path = self._table_path(table)
        if not path.exists():
            return {}
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
        return json.loads(content) if content.strip() else {}

    async def _write(self, table: str, rows: dict[str, dict[str, Any]]) -> None:
        path = self._table_path(table)
        temp_fd, temp_path = tempfile.mkstemp(dir=self.data_dir, suffix=".tmp", prefix=f".{table}_")
        os.close(temp_fd)
        try:
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(rows, ensure_ascii=False, indent=2, default=str))
            os.replace(temp_path, path)
        except Exception:
            if Path(temp_path).exists():
                Path(temp_path).unlink()
            raise
        self.logger.debug("table_written", table=table, rows=len(rows))

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        async with self._get_lock(table):
            rows = await self._read(table)
            stored = dict(record)
            stored.setdefault("id", uuid.uuid4().hex)
            rows[stored["id"]] = stored
            await self._write(table, rows)
        return stored

    async def select(
        self, table: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        async with self._get_lock(table):
            rows = await self._read(table)
        return [r for r in rows.values() if matches(r, filters)]

    async def update(
        self, table: str, record_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        async with self._get_lock(table):
            rows = await self._read(table)
            record = rows.get(record_id)
            if record is None:
                return None
            record.update(changes)
            record["id"] = record_id
            await self._write(table, rows)
        return record

    async def delete(self, table: str, record_id: str) -> bool:
        async with self._get_lock(table):
            rows = await self._read(table)
            if rows.pop(record_id, None) is None:
                return False
            await self._write(table, rows)
        return True
