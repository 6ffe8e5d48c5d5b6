"""
Record Store Protocol

Minimal persistence boundary used for audit records. The core never reads
its own state back from the store; it only writes audit trails.
"""

from typing import Any, Protocol


class RecordStore(Protocol):
    """Key-value/record store addressed by table name and record id."""

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a record, assigning an 'id' if missing. Returns the stored record."""
        ...

    async def select(
        self, table: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return records whose fields equal every filter value."""
        ...

    async def update(
        self, table: str, record_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Apply changes to a record. Returns the updated record or None if absent."""
        ...

    async def delete(self, table: str, record_id: str) -> bool:
        """Delete a record by id. Returns True if something was deleted."""
        ...
