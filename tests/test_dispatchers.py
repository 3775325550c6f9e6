from __future__ import annotations

import unittest
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from messaging.domain.email import EmailDispatcher, EmailPayload, EmailProviderResponse
from messaging.domain.request import NotificationRequest
from messaging.domain.retry import mask_recipient, send_with_retry
from messaging.domain.sms import (
    SmsDispatcher,
    SmsProviderResponse,
    build_sms_body,
    normalize_phone_number,
)
from messaging.types import SendEmailFn


class ScriptedEmailProvider:
    """Answers 202 on call number `accept_on` (1-based), 500 otherwise."""

    def __init__(self, accept_on: int | None = None, *, raise_on: int | None = None) -> None:
        self.accept_on = accept_on
        self.raise_on = raise_on
        self.calls: list[EmailPayload] = []

    def __call__(self, payload: EmailPayload) -> EmailProviderResponse:
        self.calls.append(payload)
        if self.raise_on == len(self.calls):
            raise RuntimeError("SendGrid email send failed: connection refused")
        if self.accept_on == len(self.calls):
            return EmailProviderResponse(status_code=202)
        return EmailProviderResponse(status_code=500, body="try later")


class ScriptedSmsProvider:
    """Answers without errors on call number `accept_on`, with an error otherwise."""

    def __init__(self, accept_on: int | None = None, *, raise_on: int | None = None) -> None:
        self.accept_on = accept_on
        self.raise_on = raise_on
        self.calls: list[dict[str, Any]] = []

    def __call__(self, *, body: str, from_: str, to: str) -> SmsProviderResponse:
        self.calls.append({"body": body, "from_": from_, "to": to})
        if self.raise_on == len(self.calls):
            raise RuntimeError("Twilio SMS send failed HTTP 401: bad credentials")
        if self.accept_on == len(self.calls):
            return SmsProviderResponse(sid="SM1", status="queued")
        return SmsProviderResponse(error_code=30003, error_message="Unreachable handset")


def make_email_dispatcher(provider: SendEmailFn, retries: int = 5) -> EmailDispatcher:
    return EmailDispatcher(
        provider,
        default_sender_email="no-reply@example.com",
        default_sender_name="Example Notifications",
        retries=retries,
    )


def make_sms_dispatcher(provider: ScriptedSmsProvider, retries: int = 5) -> SmsDispatcher:
    return SmsDispatcher(provider, origin_phone="+15555550100", country_code="+234", retries=retries)


def email_request(**overrides: Any) -> NotificationRequest:
    base: dict[str, Any] = {
        "to": "person@example.com",
        "subject": "Hello",
        "body": "<p>Hi there</p>",
    }
    return NotificationRequest(**(base | overrides))


def sms_request(**overrides: Any) -> NotificationRequest:
    base: dict[str, Any] = {"to": "08031234567", "body": "Your code is 1234", "sender": "Acme"}
    return NotificationRequest(**(base | overrides))


class RetryLoopTests(unittest.TestCase):
    def test_stops_at_first_acceptance(self) -> None:
        answers = iter(["status=500", None, None])
        outcome = send_with_retry(lambda: next(answers), 5)

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.attempts, 2)
        self.assertIsNone(outcome.reason)

    def test_exhausted_keeps_last_rejection(self) -> None:
        outcome = send_with_retry(lambda: "status=503", 3)

        self.assertFalse(outcome)
        self.assertEqual(outcome.attempts, 3)
        self.assertEqual(outcome.reason, "exhausted: status=503")

    def test_fault_is_not_retried(self) -> None:
        calls: list[int] = []

        def attempt() -> str | None:
            calls.append(1)
            raise ConnectionError("reset by peer")

        outcome = send_with_retry(attempt, 5)

        self.assertFalse(outcome.success)
        self.assertEqual(len(calls), 1)
        self.assertIn("ConnectionError", outcome.reason or "")

    def test_zero_retries_makes_no_attempt(self) -> None:
        calls: list[int] = []
        outcome = send_with_retry(lambda: calls.append(1), 0)

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.attempts, 0)
        self.assertEqual(calls, [])


class EmailDispatcherTests(unittest.TestCase):
    def test_accepted_on_nth_call_invokes_provider_exactly_n_times(self) -> None:
        for accept_on in range(1, 6):
            with self.subTest(accept_on=accept_on):
                provider = ScriptedEmailProvider(accept_on=accept_on)
                dispatcher = make_email_dispatcher(provider, retries=5)

                self.assertTrue(dispatcher.send_email(email_request()))
                self.assertEqual(len(provider.calls), accept_on)

    def test_never_accepted_invokes_provider_retries_times(self) -> None:
        provider = ScriptedEmailProvider()
        dispatcher = make_email_dispatcher(provider, retries=4)

        self.assertFalse(dispatcher.send_email(email_request()))
        self.assertEqual(len(provider.calls), 4)

    def test_acceptance_beyond_retry_budget_is_never_reached(self) -> None:
        provider = ScriptedEmailProvider(accept_on=4)
        dispatcher = make_email_dispatcher(provider, retries=3)

        self.assertFalse(dispatcher.send_email(email_request()))
        self.assertEqual(len(provider.calls), 3)

    def test_provider_fault_returns_false_after_one_call(self) -> None:
        provider = ScriptedEmailProvider(accept_on=2, raise_on=1)
        dispatcher = make_email_dispatcher(provider)

        with self.assertLogs("messaging.domain.retry", level="WARNING") as logs:
            self.assertFalse(dispatcher.send_email(email_request()))

        self.assertEqual(len(provider.calls), 1)
        self.assertIn("fault: RuntimeError", logs.output[0])

    def test_failure_log_masks_recipient_address(self) -> None:
        provider = ScriptedEmailProvider()
        dispatcher = make_email_dispatcher(provider, retries=1)

        with self.assertLogs("messaging.domain.retry", level="WARNING") as logs:
            self.assertFalse(dispatcher.send_email(email_request()))

        output = "\n".join(logs.output)
        self.assertNotIn("person@example.com", output)
        self.assertIn("channel=email to=p***@example.com", output)

    def test_zero_retries_makes_no_provider_call(self) -> None:
        provider = ScriptedEmailProvider(accept_on=1)
        dispatcher = make_email_dispatcher(provider, retries=0)

        self.assertFalse(dispatcher.send_email(email_request()))
        self.assertEqual(provider.calls, [])

    def test_blank_sender_uses_configured_default(self) -> None:
        for sender in (None, "", "   "):
            with self.subTest(sender=sender):
                provider = ScriptedEmailProvider(accept_on=1)
                dispatcher = make_email_dispatcher(provider)

                dispatcher.send_email(email_request(sender=sender, sender_name="Ignored"))

                payload = provider.calls[0]
                self.assertEqual(payload.sender_email, "no-reply@example.com")
                self.assertEqual(payload.sender_name, "Example Notifications")

    def test_explicit_sender_is_kept(self) -> None:
        provider = ScriptedEmailProvider(accept_on=1)
        dispatcher = make_email_dispatcher(provider)

        dispatcher.send_email(email_request(sender="ops@example.com", sender_name="Ops"))

        payload = provider.calls[0]
        self.assertEqual(payload.sender_email, "ops@example.com")
        self.assertEqual(payload.sender_name, "Ops")

    def test_default_sender_does_not_leak_into_request_or_later_calls(self) -> None:
        provider = ScriptedEmailProvider(accept_on=1)
        dispatcher = make_email_dispatcher(provider)
        request = email_request()

        dispatcher.send_email(request)

        self.assertIsNone(request.sender)
        self.assertIsNone(request.sender_name)

        defaulted = request.with_default_sender("no-reply@example.com", "Example Notifications")
        self.assertEqual(
            defaulted.with_default_sender("other@example.com", "Other"), defaulted
        )

    def test_payload_uses_body_for_text_and_html(self) -> None:
        provider = ScriptedEmailProvider(accept_on=1)
        dispatcher = make_email_dispatcher(provider)

        dispatcher.send_email(email_request())

        payload = provider.calls[0]
        self.assertEqual(payload.to, "person@example.com")
        self.assertEqual(payload.subject, "Hello")
        self.assertEqual(payload.plain_text_content, "<p>Hi there</p>")
        self.assertEqual(payload.html_content, "<p>Hi there</p>")

    def test_dispatch_outcome_reports_attempts(self) -> None:
        provider = ScriptedEmailProvider(accept_on=3)
        dispatcher = make_email_dispatcher(provider)

        outcome = dispatcher.dispatch(email_request())

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.attempts, 3)

    def test_concurrent_sends_keep_their_own_senders(self) -> None:
        seen: list[tuple[str | None, str]] = []

        def provider(payload: EmailPayload) -> EmailProviderResponse:
            seen.append((payload.sender_email, payload.to))
            return EmailProviderResponse(status_code=202)

        dispatcher = make_email_dispatcher(provider)
        requests = [
            email_request(to=f"user{i}@example.com", sender=f"s{i}@example.com" if i % 2 else None)
            for i in range(20)
        ]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(dispatcher.send_email, requests))

        self.assertTrue(all(results))
        expected = {(r.sender or "no-reply@example.com", r.to) for r in requests}
        self.assertEqual(set(seen), expected)
        self.assertTrue(all(r.sender is None for r in requests[::2]))


class PhoneNormalizationTests(unittest.TestCase):
    def test_local_number_gets_country_prefix(self) -> None:
        self.assertEqual(normalize_phone_number("08031234567", "+234"), "+2348031234567")

    def test_characters_past_subscriber_number_are_dropped(self) -> None:
        self.assertEqual(normalize_phone_number("080312345679999", "+234"), "+2348031234567")

    def test_short_input_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            normalize_phone_number("0803123456", "+234")

    def test_masked_recipient_forms(self) -> None:
        self.assertEqual(mask_recipient("person@example.com"), "p***@example.com")
        self.assertEqual(mask_recipient("08031234567"), "***4567")
        self.assertEqual(mask_recipient("1234"), "***")

    def test_body_includes_sender_label(self) -> None:
        self.assertEqual(
            build_sms_body(sms_request()),
            "Message from Acme: Your code is 1234",
        )
        self.assertEqual(
            build_sms_body(sms_request(sender=None)),
            "Message from : Your code is 1234",
        )


class SmsDispatcherTests(unittest.TestCase):
    def test_accepted_on_nth_call_invokes_provider_exactly_n_times(self) -> None:
        for accept_on in range(1, 6):
            with self.subTest(accept_on=accept_on):
                provider = ScriptedSmsProvider(accept_on=accept_on)
                dispatcher = make_sms_dispatcher(provider, retries=5)

                self.assertTrue(dispatcher.send_sms(sms_request()))
                self.assertEqual(len(provider.calls), accept_on)

    def test_never_accepted_invokes_provider_retries_times(self) -> None:
        provider = ScriptedSmsProvider()
        dispatcher = make_sms_dispatcher(provider, retries=5)

        self.assertFalse(dispatcher.send_sms(sms_request()))
        self.assertEqual(len(provider.calls), 5)

    def test_error_message_alone_counts_as_rejection(self) -> None:
        calls: list[int] = []

        def provider(*, body: str, from_: str, to: str) -> SmsProviderResponse:
            calls.append(1)
            return SmsProviderResponse(sid="SM1", error_message="Queue overflow")

        dispatcher = SmsDispatcher(provider, origin_phone="+15555550100", retries=2)

        self.assertFalse(dispatcher.send_sms(sms_request()))
        self.assertEqual(len(calls), 2)

    def test_provider_fault_returns_false_after_one_call(self) -> None:
        provider = ScriptedSmsProvider(accept_on=2, raise_on=1)
        dispatcher = make_sms_dispatcher(provider)

        self.assertFalse(dispatcher.send_sms(sms_request()))
        self.assertEqual(len(provider.calls), 1)

    def test_zero_retries_makes_no_provider_call(self) -> None:
        provider = ScriptedSmsProvider(accept_on=1)
        dispatcher = make_sms_dispatcher(provider, retries=0)

        self.assertFalse(dispatcher.send_sms(sms_request()))
        self.assertEqual(provider.calls, [])

    def test_short_number_fails_without_provider_call(self) -> None:
        provider = ScriptedSmsProvider(accept_on=1)
        dispatcher = make_sms_dispatcher(provider)

        self.assertFalse(dispatcher.send_sms(sms_request(to="12345")))
        self.assertEqual(provider.calls, [])

    def test_failure_log_keeps_only_last_digits_of_number(self) -> None:
        provider = ScriptedSmsProvider()
        dispatcher = make_sms_dispatcher(provider, retries=1)

        with self.assertLogs("messaging.domain.retry", level="WARNING") as logs:
            self.assertFalse(dispatcher.send_sms(sms_request(to="0803123456")))
            self.assertFalse(dispatcher.send_sms(sms_request()))

        output = "\n".join(logs.output)
        self.assertNotIn("0803123456", output)
        self.assertNotIn("08031234567", output)
        self.assertIn("to=***3456", output)
        self.assertIn("to=***4567", output)

    def test_provider_receives_normalized_number_origin_and_body(self) -> None:
        provider = ScriptedSmsProvider(accept_on=1)
        dispatcher = make_sms_dispatcher(provider)

        self.assertTrue(dispatcher.send_sms(sms_request()))

        self.assertEqual(
            provider.calls,
            [
                {
                    "body": "Message from Acme: Your code is 1234",
                    "from_": "+15555550100",
                    "to": "+2348031234567",
                }
            ],
        )

    def test_sms_sender_is_not_defaulted(self) -> None:
        provider = ScriptedSmsProvider(accept_on=1)
        dispatcher = make_sms_dispatcher(provider)

        dispatcher.send_sms(sms_request(sender="  "))

        self.assertEqual(provider.calls[0]["body"], "Message from   : Your code is 1234")


if __name__ == "__main__":
    unittest.main()
