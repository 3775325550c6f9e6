"""Environment-variable configuration for dispatch.

Settings are read once at startup by the composition root and treated as
read-only afterwards. Missing required values raise `RuntimeError`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..domain.sms import DEFAULT_COUNTRY_CODE
from .real_senders import DEFAULT_SENDGRID_BASE_URL, DEFAULT_TWILIO_BASE_URL

DEFAULT_RETRIES = 5
DEFAULT_REQUEST_TOPIC = "notifications.requested"


@dataclass(frozen=True)
class MessagingSettings:
    retries: int = DEFAULT_RETRIES
    email_retries: int | None = None
    sms_retries: int | None = None

    def retries_for(self, channel: str) -> int:
        override = {"email": self.email_retries, "sms": self.sms_retries}.get(channel)
        return self.retries if override is None else override


@dataclass(frozen=True)
class SendGridSettings:
    api_key: str
    email: str
    name: str | None = None
    base_url: str = DEFAULT_SENDGRID_BASE_URL
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class TwilioSettings:
    account_sid: str
    auth_token: str
    phone: str
    country_code: str = DEFAULT_COUNTRY_CODE
    base_url: str = DEFAULT_TWILIO_BASE_URL
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class DispatchConfig:
    messaging: MessagingSettings
    sendgrid: SendGridSettings
    twilio: TwilioSettings


@dataclass(frozen=True)
class KafkaSettings:
    bootstrap_servers: tuple[str, ...]
    topic: str = DEFAULT_REQUEST_TOPIC
    group_id: str = "notifications-dispatch-worker"
    auto_offset_reset: str = "earliest"
    producer_acks: str = "all"
    poll_timeout_seconds: float = 1.0
    max_records: int = 50
    send_timeout_seconds: float = 10.0
    dlq_enabled: bool = True
    dlq_topic: str | None = None
    dlq_send_timeout_seconds: float = 10.0

    @property
    def poll_timeout_ms(self) -> int:
        return max(1, int(self.poll_timeout_seconds * 1000))

    @property
    def dead_letter_topic(self) -> str:
        return self.dlq_topic or f"{self.topic}.dlq"


def load_messaging_settings_from_env() -> MessagingSettings:
    return MessagingSettings(
        retries=_env_int("MESSAGING_RETRIES", DEFAULT_RETRIES),
        email_retries=_env_optional_retries("MESSAGING_EMAIL_RETRIES"),
        sms_retries=_env_optional_retries("MESSAGING_SMS_RETRIES"),
    )


def load_sendgrid_settings_from_env() -> SendGridSettings:
    return SendGridSettings(
        api_key=_required_env("SENDGRID_API_KEY"),
        email=_required_env("SENDGRID_FROM_EMAIL"),
        name=_optional_env("SENDGRID_FROM_NAME"),
        base_url=os.getenv("SENDGRID_API_BASE_URL", DEFAULT_SENDGRID_BASE_URL).rstrip("/"),
        timeout_seconds=_env_seconds("SENDGRID_TIMEOUT_SECONDS", 10.0),
    )


def load_twilio_settings_from_env() -> TwilioSettings:
    return TwilioSettings(
        account_sid=_required_env("TWILIO_ACCOUNT_SID"),
        auth_token=_required_env("TWILIO_AUTH_TOKEN"),
        phone=_required_env("TWILIO_FROM_PHONE"),
        country_code=os.getenv("SMS_COUNTRY_CODE", DEFAULT_COUNTRY_CODE).strip(),
        base_url=os.getenv("TWILIO_API_BASE_URL", DEFAULT_TWILIO_BASE_URL).rstrip("/"),
        timeout_seconds=_env_seconds("TWILIO_TIMEOUT_SECONDS", 10.0),
    )


def load_dispatch_config_from_env() -> DispatchConfig:
    return DispatchConfig(
        messaging=load_messaging_settings_from_env(),
        sendgrid=load_sendgrid_settings_from_env(),
        twilio=load_twilio_settings_from_env(),
    )


def load_kafka_settings_from_env() -> KafkaSettings:
    raw_servers = _required_env("KAFKA_BOOTSTRAP_SERVERS")
    servers = tuple(item.strip() for item in raw_servers.split(",") if item.strip())
    if not servers:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    send_timeout = _env_seconds("KAFKA_SEND_TIMEOUT_SECONDS", 10.0)

    return KafkaSettings(
        bootstrap_servers=servers,
        topic=_optional_env("KAFKA_TOPIC_NOTIFICATIONS_REQUESTED") or DEFAULT_REQUEST_TOPIC,
        group_id=_optional_env("KAFKA_GROUP_ID") or "notifications-dispatch-worker",
        auto_offset_reset=_optional_env("KAFKA_AUTO_OFFSET_RESET") or "earliest",
        producer_acks=_optional_env("KAFKA_PRODUCER_ACKS") or "all",
        poll_timeout_seconds=_env_seconds("KAFKA_POLL_TIMEOUT_SECONDS", 1.0),
        max_records=_env_int("KAFKA_MAX_RECORDS_PER_POLL", 50, minimum=1),
        send_timeout_seconds=send_timeout,
        dlq_enabled=_env_bool("KAFKA_DLQ_ENABLED", default=True),
        dlq_topic=_optional_env("KAFKA_TOPIC_NOTIFICATIONS_REQUESTED_DLQ"),
        dlq_send_timeout_seconds=_env_seconds("KAFKA_DLQ_SEND_TIMEOUT_SECONDS", send_timeout),
    )


def load_env_file(path: Path) -> None:
    """Load `KEY=value` lines into the environment without overriding it."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = text.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"Invalid integer value for {name}: {raw!r}") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}")
    return value


def _env_optional_retries(name: str) -> int | None:
    if _optional_env(name) is None:
        return None
    return _env_int(name, DEFAULT_RETRIES)


def _env_seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"Invalid number of seconds for {name}: {raw!r}") from exc
    if not value > 0:
        raise RuntimeError(f"{name} must be > 0")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")
