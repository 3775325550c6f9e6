"""SMS channel dispatch logic.

Mental model refresher:
- Domain modules hold channel rules: destination number format, message
  text, and when a provider response counts as accepted.
- The provider client is built once by the composition root and injected
  here as `create_message`; nothing in this module initializes a session.
- Numbers are normalized in one fixed national format: one leading trunk
  character is dropped, the next 10 characters are kept, and the configured
  country code is prepended. Other shapes are not reinterpreted.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..types import CreateMessageFn
from .request import NotificationRequest
from .retry import DispatchOutcome, fault_outcome, log_outcome, send_with_retry

DEFAULT_COUNTRY_CODE = "+234"
SUBSCRIBER_DIGITS = 10


@dataclass(frozen=True)
class SmsPayload:
    body: str
    from_: str
    to: str


@dataclass(frozen=True)
class SmsProviderResponse:
    sid: str | None = None
    status: str | None = None
    error_code: int | str | None = None
    error_message: str | None = None

    @property
    def accepted(self) -> bool:
        return self.error_code in (None, "") and not self.error_message


def normalize_phone_number(raw: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """`"08031234567"` -> `"+2348031234567"`.

    Characters past the 11th are dropped. Input shorter than 11 characters
    raises ValueError instead of yielding a truncated number.
    """
    if len(raw) < SUBSCRIBER_DIGITS + 1:
        raise ValueError(
            f"phone number has {len(raw)} characters, expected at least {SUBSCRIBER_DIGITS + 1}"
        )
    return f"{country_code}{raw[1:SUBSCRIBER_DIGITS + 1]}"


def build_sms_body(request: NotificationRequest) -> str:
    return f"Message from {request.sender or ''}: {request.body}"


class SmsDispatcher:
    """Sends SMS requests through one injected provider call with retry."""

    def __init__(
        self,
        create_message: CreateMessageFn,
        *,
        origin_phone: str,
        country_code: str = DEFAULT_COUNTRY_CODE,
        retries: int = 5,
    ) -> None:
        self._create_message = create_message
        self._origin_phone = origin_phone
        self._country_code = country_code
        self._retries = retries

    @property
    def retries(self) -> int:
        return self._retries

    def build_payload(self, request: NotificationRequest) -> SmsPayload:
        return SmsPayload(
            body=build_sms_body(request),
            from_=self._origin_phone,
            to=normalize_phone_number(request.to, self._country_code),
        )

    def dispatch(self, request: NotificationRequest) -> DispatchOutcome:
        try:
            payload = self.build_payload(request)
        except Exception as exc:
            outcome = fault_outcome(exc)
        else:
            outcome = send_with_retry(lambda: self._attempt(payload), self._retries)

        log_outcome("sms", request.to, outcome)
        return outcome

    def send_sms(self, request: NotificationRequest) -> bool:
        """Send one SMS. True only when the provider reported no error."""
        return self.dispatch(request).success

    def _attempt(self, payload: SmsPayload) -> str | None:
        response = self._create_message(
            body=payload.body, from_=payload.from_, to=payload.to
        )
        if response.accepted:
            return None
        return f"error_code={response.error_code} error_message={response.error_message}"
