#!/usr/bin/env python3
"""Publish one `notifications.requested` event to Kafka for local testing."""

from __future__ import annotations

import argparse
import sys
import uuid
from datetime import UTC, datetime
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from messaging.adapters.kafka_runtime import publish_notification_request  # noqa: E402
from messaging.adapters.settings import load_env_file  # noqa: E402


def main() -> int:
    load_env_file(REPO_ROOT / ".env")
    args = parse_args()
    payload = build_payload(args)
    metadata = publish_notification_request(payload, topic=args.topic)

    print("[PUBLISHED]")
    print(f"topic={metadata['topic']}")
    print(f"partition={metadata['partition']}")
    print(f"offset={metadata['offset']}")
    print(f"event_id={payload['event_id']}")
    print(f"channel={payload['channel']} to={payload['message']['to']}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish one notifications.requested event for Kafka testing."
    )
    parser.add_argument("--channel", choices=["email", "sms"], required=True)
    parser.add_argument(
        "--to",
        required=True,
        help="Recipient email address, or local phone number such as 08031234567.",
    )
    parser.add_argument("--body", required=True, help="Message body.")
    parser.add_argument("--subject", default=None, help="Email subject.")
    parser.add_argument(
        "--from",
        dest="sender",
        default=None,
        help="Sender address/identifier. Email falls back to the configured sender.",
    )
    parser.add_argument("--sender-name", default=None, help="Email sender display name.")
    parser.add_argument(
        "--event-id",
        default=None,
        help="Optional event id. Default: generated UUID.",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Override Kafka topic (defaults to KAFKA_TOPIC_NOTIFICATIONS_REQUESTED).",
    )
    return parser.parse_args()


def build_payload(args: argparse.Namespace) -> dict[str, object]:
    message: dict[str, object] = {"to": args.to, "body": args.body}
    if args.sender:
        message["from"] = args.sender
    if args.sender_name:
        message["sender_name"] = args.sender_name
    if args.subject:
        message["subject"] = args.subject

    return {
        "event_id": args.event_id or f"evt-{uuid.uuid4()}",
        "event_type": "notifications.requested",
        "occurred_at": datetime.now(tz=UTC).isoformat(),
        "channel": args.channel,
        "message": message,
    }


if __name__ == "__main__":
    sys.exit(main())
