"""Consumer-handler adapter functions (Kafka-like flow without Kafka).

Mental model refresher:
- This is the caller of the notification service.
- Real Kafka code calls this after polling a record.
- Flow:
  record -> parse adapter -> service.send_* -> record outcome -> commit/reject
- The outcome is persisted as a `MessageRecord` whatever the result, so the
  history shows failed sends too.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..application.service import NotificationService
from ..domain.records import MessageRecord
from ..types import EventDict, HandlerResult
from .payload import NotificationCommand, parse_request_payload

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
RejectFn = Callable[[Record, str], None]


def handle_message(
    record: Record,
    *,
    service: NotificationService,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> HandlerResult:
    """Handle one incoming record and decide commit/no-commit.

    Commit policy:
    - Commit only when the provider accepted the notification.
    - Parse failures and failed sends go to `reject` instead.
    - A failed history write is reported in `error` but never changes the
      commit decision.
    """
    try:
        payload = _get_record_payload(record)
        command = parse_request_payload(payload)
    except Exception as exc:
        error = f"parse_failed: {exc}"
        if reject is not None:
            reject(record, error)
        return {
            "status": "parse_failed",
            "record_meta": _record_meta(record),
            "command": None,
            "sent": False,
            "should_commit": False,
            "error": error,
        }

    sent = dispatch_command(command, service)
    record_error = _record_outcome(command, sent, service)

    if sent:
        commit(record)
        status = "sent_and_committed"
        error = record_error
    else:
        status = "not_sent"
        error = f"{command.channel}_dispatch_failed"
        if reject is not None:
            reject(record, error)
        if record_error is not None:
            error = f"{error}; {record_error}"

    return {
        "status": status,
        "record_meta": _record_meta(record),
        "command": command,
        "sent": sent,
        "should_commit": sent,
        "error": error,
    }


def handle_batch(
    records: Sequence[Record],
    *,
    service: NotificationService,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> list[HandlerResult]:
    """Handle a batch of records sequentially using `handle_message`."""
    return [
        handle_message(record, service=service, commit=commit, reject=reject)
        for record in records
    ]


def dispatch_command(command: NotificationCommand, service: NotificationService) -> bool:
    if command.channel == "email":
        return service.send_email(command.request)
    return service.send_sms(command.request)


def _record_outcome(
    command: NotificationCommand, sent: bool, service: NotificationService
) -> str | None:
    try:
        service.add(_message_record(command, sent))
    except Exception as exc:
        return f"record_failed: {type(exc).__name__}: {exc}"
    return None


def _message_record(command: NotificationCommand, sent: bool) -> MessageRecord:
    request = command.request
    return MessageRecord(
        channel=command.channel,
        recipient=request.to,
        body=request.body,
        status=sent,
        sender=request.sender,
        subject=request.subject,
    )


def _get_record_payload(record: Record) -> EventDict:
    payload = record.get("value")
    if not isinstance(payload, dict):
        raise ValueError("record.value must be a dict payload")
    return payload


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }
