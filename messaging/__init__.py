"""Outbound email/SMS dispatch with bounded retry and message history."""

from .adapters.memory_store import InMemoryMessageRepository
from .application.service import NotificationService
from .bootstrap import (
    build_console_notification_service,
    build_notification_service,
    build_notification_service_from_env,
)
from .domain.email import EmailDispatcher
from .domain.records import MessageRecord, MessageRepository
from .domain.request import NotificationRequest
from .domain.sms import SmsDispatcher, normalize_phone_number

__all__ = [
    "EmailDispatcher",
    "InMemoryMessageRepository",
    "MessageRecord",
    "MessageRepository",
    "NotificationRequest",
    "NotificationService",
    "SmsDispatcher",
    "build_console_notification_service",
    "build_notification_service",
    "build_notification_service_from_env",
    "normalize_phone_number",
]
