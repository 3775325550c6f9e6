"""Message history records and the store interface the service talks to."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, Sequence


@dataclass(frozen=True)
class MessageRecord:
    """A notification that was (or was not) handed to a provider.

    `status` is True when delivered to the provider, False when dispatch
    failed, and None when no outcome was recorded.
    """

    channel: str
    recipient: str
    body: str
    status: bool | None = None
    sender: str | None = None
    subject: str | None = None
    message_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


class MessageRepository(Protocol):
    def get_all_messages(self) -> Sequence[MessageRecord]: ...

    def get_messages_by_status(self, status: bool | None) -> Sequence[MessageRecord]: ...

    def add_entity(self, record: MessageRecord) -> None: ...

    def save_all(self) -> None: ...
