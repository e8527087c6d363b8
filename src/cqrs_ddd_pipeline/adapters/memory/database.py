"""InMemoryDatabase: shared row store behind in-memory units of work."""

from __future__ import annotations

import threading
from typing import Any

ADD = "add"
UPDATE = "update"
DELETE = "delete"

Write = tuple[str, type[Any], Any, Any]  # (op, entity_type, entity_id, entity)


class InMemoryDatabase:
    """Dict-of-dicts store keyed by entity type, then entity id.

    Shared by every :class:`InMemoryUnitOfWork` of an application (or test).
    :meth:`apply` writes a batch atomically; integer ids come from a per-type
    sequence that, like a database sequence, is never rolled back.
    """

    def __init__(self) -> None:
        self._tables: dict[type[Any], dict[Any, Any]] = {}
        self._sequences: dict[type[Any], int] = {}
        self._lock = threading.Lock()

    def next_id(self, entity_type: type[Any]) -> int:
        with self._lock:
            value = self._sequences.get(entity_type, 0) + 1
            self._sequences[entity_type] = value
            return value

    def apply(self, writes: list[Write]) -> None:
        with self._lock:
            for op, entity_type, entity_id, entity in writes:
                table = self._tables.setdefault(entity_type, {})
                if op == DELETE:
                    table.pop(entity_id, None)
                else:
                    table[entity_id] = entity

    def rows(self, entity_type: type[Any]) -> dict[Any, Any]:
        """Snapshot of one table."""
        with self._lock:
            return dict(self._tables.get(entity_type, {}))

    def get(self, entity_type: type[Any], entity_id: Any) -> Any | None:
        with self._lock:
            return self._tables.get(entity_type, {}).get(entity_id)

    def count(self, entity_type: type[Any]) -> int:
        with self._lock:
            return len(self._tables.get(entity_type, {}))

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()
            self._sequences.clear()
