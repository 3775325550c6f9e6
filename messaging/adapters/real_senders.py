"""Real provider clients for production sending.

Mental model refresher:
- This module is an outbound adapter.
- Each client is built once with its credentials and then passed to a
  dispatcher as a plain callable (`client.send_email`,
  `client.create_message`).
- Clients make exactly one HTTP request per call. Retrying is the
  dispatcher's job, not theirs.

Error contract:
- SendGrid: any HTTP status comes back as an `EmailProviderResponse` so the
  dispatcher can retry non-202 answers. Only transport failures raise.
- Twilio: the API answers errors with 4xx/5xx, which raise `RuntimeError`
  the same way the Twilio SDK raises on an API error. A 2xx body carrying
  `error_code`/`error_message` is returned as-is.
"""

from __future__ import annotations

import base64
import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from ..domain.email import EmailPayload, EmailProviderResponse
from ..domain.sms import SmsProviderResponse

DEFAULT_SENDGRID_BASE_URL = "https://api.sendgrid.com"
DEFAULT_TWILIO_BASE_URL = "https://api.twilio.com"


class SendGridClient:
    """Minimal SendGrid v3 `mail/send` client."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_SENDGRID_BASE_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._endpoint = f"{base_url.rstrip('/')}/v3/mail/send"
        self._timeout_seconds = timeout_seconds

    def send_email(self, payload: EmailPayload) -> EmailProviderResponse:
        data = json.dumps(_sendgrid_message(payload)).encode("utf-8")
        request = urllib.request.Request(self._endpoint, data=data, method="POST")
        request.add_header("Authorization", f"Bearer {self._api_key}")
        request.add_header("Content-Type", "application/json")

        try:
            with urllib.request.urlopen(request, timeout=self._timeout_seconds) as response:
                status = int(response.getcode())
                body = response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            return EmailProviderResponse(status_code=exc.code, body=details[:300])
        except urllib.error.URLError as exc:
            raise RuntimeError(f"SendGrid email send failed: {exc.reason}") from exc

        return EmailProviderResponse(status_code=status, body=body)


class TwilioClient:
    """Minimal Twilio Messages client bound to one account."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        *,
        base_url: str = DEFAULT_TWILIO_BASE_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._auth_header = _basic_auth_header(account_sid, auth_token)
        encoded_sid = urllib.parse.quote(account_sid, safe="")
        self._endpoint = (
            f"{base_url.rstrip('/')}/2010-04-01/Accounts/{encoded_sid}/Messages.json"
        )
        self._timeout_seconds = timeout_seconds

    def create_message(self, *, body: str, from_: str, to: str) -> SmsProviderResponse:
        data = urllib.parse.urlencode({"To": to, "From": from_, "Body": body}).encode("utf-8")
        request = urllib.request.Request(self._endpoint, data=data, method="POST")
        request.add_header("Authorization", self._auth_header)
        request.add_header("Content-Type", "application/x-www-form-urlencoded")

        try:
            with urllib.request.urlopen(request, timeout=self._timeout_seconds) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise RuntimeError(
                f"Twilio SMS send failed HTTP {exc.code}: {details[:300]}"
            ) from exc
        except urllib.error.URLError as exc:
            raise RuntimeError(f"Twilio SMS send failed: {exc.reason}") from exc

        return _twilio_response(raw)


def _sendgrid_message(payload: EmailPayload) -> dict[str, Any]:
    sender: dict[str, str] = {"email": payload.sender_email or ""}
    if payload.sender_name:
        sender["name"] = payload.sender_name

    message: dict[str, Any] = {
        "personalizations": [{"to": [{"email": payload.to}]}],
        "from": sender,
        "content": [
            {"type": "text/plain", "value": payload.plain_text_content},
            {"type": "text/html", "value": payload.html_content},
        ],
    }
    if payload.subject is not None:
        message["subject"] = payload.subject
    return message


def _twilio_response(raw: bytes) -> SmsProviderResponse:
    parsed = json.loads(raw.decode("utf-8")) if raw else {}
    if not isinstance(parsed, dict):
        raise RuntimeError("Twilio response must be a JSON object")
    return SmsProviderResponse(
        sid=parsed.get("sid"),
        status=parsed.get("status"),
        error_code=parsed.get("error_code"),
        error_message=parsed.get("error_message"),
    )


def _basic_auth_header(username: str, password: str) -> str:
    token = f"{username}:{password}".encode("utf-8")
    encoded = base64.b64encode(token).decode("ascii")
    return f"Basic {encoded}"
