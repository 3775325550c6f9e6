"""Channel-agnostic notification request."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationRequest:
    """One outbound notification as a caller describes it.

    `sender` is the `from` address (email) or identifier (SMS). `sender_name`
    and `subject` only apply to email.
    """

    to: str
    body: str
    sender: str | None = None
    sender_name: str | None = None
    subject: str | None = None

    @property
    def has_sender(self) -> bool:
        return bool(self.sender and self.sender.strip())

    def with_default_sender(self, address: str, name: str | None) -> NotificationRequest:
        """Return a copy carrying the default sender when none is set."""
        if self.has_sender:
            return self
        return dataclasses.replace(self, sender=address, sender_name=name)
