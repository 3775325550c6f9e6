"""Console provider stand-ins for local smoke runs.

They print what would have been sent and always answer "accepted", so the
dispatch flow can be exercised without network access or credentials.
"""

from __future__ import annotations

from ..domain.email import ACCEPTED_STATUS, EmailPayload, EmailProviderResponse
from ..domain.sms import SmsProviderResponse


def send_email_via_console(payload: EmailPayload) -> EmailProviderResponse:
    print("[EMAIL]")
    print(f"from={payload.sender_name or ''} <{payload.sender_email or ''}>")
    print(f"to={payload.to}")
    print(f"subject={payload.subject or ''}")
    print(f"body={payload.plain_text_content}")
    return EmailProviderResponse(status_code=ACCEPTED_STATUS)


def create_message_via_console(*, body: str, from_: str, to: str) -> SmsProviderResponse:
    print("[SMS]")
    print(f"from={from_}")
    print(f"to={to}")
    print(f"body={body}")
    return SmsProviderResponse(sid="console", status="queued")
