"""Email channel dispatch logic.

Mental model refresher:
- Domain modules hold channel rules: which sender to use, what the provider
  payload looks like, and when a provider response counts as accepted.
- The provider call itself is injected (`send_email`), so this module never
  knows whether SendGrid, a console stub or a test double is underneath.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..types import SendEmailFn
from .request import NotificationRequest
from .retry import DispatchOutcome, fault_outcome, log_outcome, send_with_retry

ACCEPTED_STATUS = 202


@dataclass(frozen=True)
class EmailPayload:
    """Provider-neutral email message, one recipient."""

    sender_email: str | None
    sender_name: str | None
    to: str
    subject: str | None
    plain_text_content: str
    html_content: str


@dataclass(frozen=True)
class EmailProviderResponse:
    status_code: int
    body: str = ""

    @property
    def accepted(self) -> bool:
        # 202 means queued by the provider, not delivered.
        return self.status_code == ACCEPTED_STATUS


class EmailDispatcher:
    """Sends email requests through one injected provider call with retry."""

    def __init__(
        self,
        send_email: SendEmailFn,
        *,
        default_sender_email: str,
        default_sender_name: str | None = None,
        retries: int = 5,
    ) -> None:
        self._send_email = send_email
        self._default_sender_email = default_sender_email
        self._default_sender_name = default_sender_name
        self._retries = retries

    @property
    def retries(self) -> int:
        return self._retries

    def build_payload(self, request: NotificationRequest) -> EmailPayload:
        """Apply the default sender if needed and map to an `EmailPayload`."""
        effective = request.with_default_sender(
            self._default_sender_email, self._default_sender_name
        )
        return EmailPayload(
            sender_email=effective.sender,
            sender_name=effective.sender_name,
            to=effective.to,
            subject=effective.subject,
            plain_text_content=effective.body,
            html_content=effective.body,
        )

    def dispatch(self, request: NotificationRequest) -> DispatchOutcome:
        try:
            payload = self.build_payload(request)
        except Exception as exc:
            outcome = fault_outcome(exc)
        else:
            outcome = send_with_retry(lambda: self._attempt(payload), self._retries)

        log_outcome("email", request.to, outcome)
        return outcome

    def send_email(self, request: NotificationRequest) -> bool:
        """Send one email. True only when the provider accepted it."""
        return self.dispatch(request).success

    def _attempt(self, payload: EmailPayload) -> str | None:
        response = self._send_email(payload)
        if response.accepted:
            return None
        return f"status={response.status_code}"
