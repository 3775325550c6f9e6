"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data (a `notifications.requested` Kafka
  payload) into a `NotificationCommand` the application can dispatch.
- It validates shape and required fields only. Whether the send succeeds
  is decided by the dispatchers, not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..domain.request import NotificationRequest
from ..types import Event

CHANNELS = ("email", "sms")


@dataclass(frozen=True)
class NotificationCommand:
    event_id: str
    channel: str
    request: NotificationRequest


def parse_request_payload(payload: Event) -> NotificationCommand:
    """Normalize a Kafka-style payload into a `NotificationCommand`.

    Expected shape::

        {"event_id": "...", "channel": "email" | "sms",
         "message": {"from": ..., "sender_name": ..., "to": ...,
                     "subject": ..., "body": ...}}
    """
    message = payload.get("message", {}) or {}
    if not isinstance(message, dict):
        raise ValueError("message must be an object")

    channel = _as_required_str(payload.get("channel"), "channel").lower()
    if channel not in CHANNELS:
        raise ValueError(f"Unsupported channel: {channel!r}")

    request = NotificationRequest(
        to=_as_required_str(message.get("to"), "message.to"),
        body=_as_required_text(message.get("body"), "message.body"),
        sender=_as_optional_str(message.get("from")),
        sender_name=_as_optional_str(message.get("sender_name")),
        subject=_as_optional_str(message.get("subject")) if channel == "email" else None,
    )
    return NotificationCommand(
        event_id=_as_required_str(payload.get("event_id"), "event_id"),
        channel=channel,
        request=request,
    )


def _as_required_str(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_required_text(value: Any, field_name: str) -> str:
    text = str(value) if value is not None else ""
    if not text.strip():
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
