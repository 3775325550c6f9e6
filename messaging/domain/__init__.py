"""Domain layer: request model, retry policy and channel dispatchers."""

from .email import EmailDispatcher, EmailPayload, EmailProviderResponse
from .records import MessageRecord, MessageRepository
from .request import NotificationRequest
from .retry import DispatchOutcome, send_with_retry
from .sms import SmsDispatcher, SmsPayload, SmsProviderResponse, normalize_phone_number

__all__ = [
    "DispatchOutcome",
    "EmailDispatcher",
    "EmailPayload",
    "EmailProviderResponse",
    "MessageRecord",
    "MessageRepository",
    "NotificationRequest",
    "SmsDispatcher",
    "SmsPayload",
    "SmsProviderResponse",
    "normalize_phone_number",
    "send_with_retry",
]
