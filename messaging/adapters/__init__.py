"""Adapter layer: provider clients, configuration, store and transport glue."""

from .consumer_handler import handle_batch, handle_message
from .fake_senders import create_message_via_console, send_email_via_console
from .kafka_runtime import publish_notification_request, run_notification_worker_forever
from .memory_store import InMemoryMessageRepository
from .payload import NotificationCommand, parse_request_payload
from .real_senders import SendGridClient, TwilioClient
from .settings import (
    DispatchConfig,
    KafkaSettings,
    MessagingSettings,
    SendGridSettings,
    TwilioSettings,
    load_dispatch_config_from_env,
    load_kafka_settings_from_env,
)

__all__ = [
    "DispatchConfig",
    "InMemoryMessageRepository",
    "KafkaSettings",
    "MessagingSettings",
    "NotificationCommand",
    "SendGridClient",
    "SendGridSettings",
    "TwilioClient",
    "TwilioSettings",
    "create_message_via_console",
    "handle_batch",
    "handle_message",
    "load_dispatch_config_from_env",
    "load_kafka_settings_from_env",
    "parse_request_payload",
    "publish_notification_request",
    "run_notification_worker_forever",
    "send_email_via_console",
]
