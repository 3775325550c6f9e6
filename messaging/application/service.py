"""Application façade over the channel dispatchers and the message store.

Mental model refresher:
- Callers (the Kafka worker, scripts) talk to `NotificationService` only.
- Sending delegates verbatim to the channel dispatchers.
- History operations pass through to the repository; `add` also saves.
"""

from __future__ import annotations

from ..domain.email import EmailDispatcher
from ..domain.records import MessageRecord, MessageRepository
from ..domain.request import NotificationRequest
from ..domain.sms import SmsDispatcher


class NotificationService:
    def __init__(
        self,
        *,
        email: EmailDispatcher,
        sms: SmsDispatcher,
        repository: MessageRepository,
    ) -> None:
        self._email = email
        self._sms = sms
        self._repository = repository

    def send_email(self, request: NotificationRequest) -> bool:
        return self._email.send_email(request)

    def send_sms(self, request: NotificationRequest) -> bool:
        return self._sms.send_sms(request)

    def list_all(self) -> list[MessageRecord]:
        return list(self._repository.get_all_messages())

    def list_by_status(self, status: bool | None) -> list[MessageRecord]:
        return list(self._repository.get_messages_by_status(status))

    def add(self, record: MessageRecord) -> None:
        self._repository.add_entity(record)
        self._repository.save_all()
