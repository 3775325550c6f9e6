"""Composition root: wire settings, provider clients, dispatchers and store.

Provider clients are built here exactly once per service. Dispatchers never
initialize provider sessions themselves.
"""

from __future__ import annotations

from .adapters.fake_senders import create_message_via_console, send_email_via_console
from .adapters.memory_store import InMemoryMessageRepository
from .adapters.real_senders import SendGridClient, TwilioClient
from .adapters.settings import DispatchConfig, MessagingSettings, load_dispatch_config_from_env
from .application.service import NotificationService
from .domain.email import EmailDispatcher
from .domain.records import MessageRepository
from .domain.sms import DEFAULT_COUNTRY_CODE, SmsDispatcher


def build_notification_service(
    config: DispatchConfig,
    *,
    repository: MessageRepository | None = None,
) -> NotificationService:
    """Build a service talking to SendGrid and Twilio."""
    sendgrid = SendGridClient(
        config.sendgrid.api_key,
        base_url=config.sendgrid.base_url,
        timeout_seconds=config.sendgrid.timeout_seconds,
    )
    twilio = TwilioClient(
        config.twilio.account_sid,
        config.twilio.auth_token,
        base_url=config.twilio.base_url,
        timeout_seconds=config.twilio.timeout_seconds,
    )
    return NotificationService(
        email=EmailDispatcher(
            sendgrid.send_email,
            default_sender_email=config.sendgrid.email,
            default_sender_name=config.sendgrid.name,
            retries=config.messaging.retries_for("email"),
        ),
        sms=SmsDispatcher(
            twilio.create_message,
            origin_phone=config.twilio.phone,
            country_code=config.twilio.country_code,
            retries=config.messaging.retries_for("sms"),
        ),
        repository=repository if repository is not None else InMemoryMessageRepository(),
    )


def build_notification_service_from_env(
    *,
    repository: MessageRepository | None = None,
) -> NotificationService:
    return build_notification_service(load_dispatch_config_from_env(), repository=repository)


def build_console_notification_service(
    *,
    messaging: MessagingSettings | None = None,
    default_sender_email: str = "no-reply@example.com",
    default_sender_name: str | None = "Notifications",
    origin_phone: str = "+15555550100",
    country_code: str = DEFAULT_COUNTRY_CODE,
    repository: MessageRepository | None = None,
) -> NotificationService:
    """Build a service whose providers print to stdout instead of sending."""
    messaging = messaging or MessagingSettings()
    return NotificationService(
        email=EmailDispatcher(
            send_email_via_console,
            default_sender_email=default_sender_email,
            default_sender_name=default_sender_name,
            retries=messaging.retries_for("email"),
        ),
        sms=SmsDispatcher(
            create_message_via_console,
            origin_phone=origin_phone,
            country_code=country_code,
            retries=messaging.retries_for("sms"),
        ),
        repository=repository if repository is not None else InMemoryMessageRepository(),
    )
