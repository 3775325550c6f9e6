"""In-memory message repository.

`add_entity` stages a record; readers only see it after `save_all`.
"""

from __future__ import annotations

import threading

from ..domain.records import MessageRecord


class InMemoryMessageRepository:
    def __init__(self, records: list[MessageRecord] | None = None) -> None:
        self._lock = threading.Lock()
        self._saved: list[MessageRecord] = list(records or [])
        self._pending: list[MessageRecord] = []

    def get_all_messages(self) -> list[MessageRecord]:
        with self._lock:
            return list(self._saved)

    def get_messages_by_status(self, status: bool | None) -> list[MessageRecord]:
        with self._lock:
            return [record for record in self._saved if record.status is status]

    def add_entity(self, record: MessageRecord) -> None:
        with self._lock:
            self._pending.append(record)

    def save_all(self) -> None:
        with self._lock:
            self._saved.extend(self._pending)
            self._pending.clear()
