"""Shared type aliases for the messaging package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from .domain.email import EmailPayload, EmailProviderResponse
    from .domain.sms import SmsProviderResponse

Event = Mapping[str, Any]
EventDict = dict[str, Any]
HandlerResult = dict[str, Any]

SendEmailFn = Callable[["EmailPayload"], "EmailProviderResponse"]
CreateMessageFn = Callable[..., "SmsProviderResponse"]
