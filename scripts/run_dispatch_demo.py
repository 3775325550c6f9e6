#!/usr/bin/env python3
"""Run the dispatch flow locally without Kafka or provider accounts.

Sends a small batch of sample requests through console providers, then
prints the recorded message history grouped by status.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from messaging.adapters.consumer_handler import handle_batch  # noqa: E402
from messaging.adapters.settings import MessagingSettings  # noqa: E402
from messaging.bootstrap import build_console_notification_service  # noqa: E402


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    service = build_console_notification_service(
        messaging=MessagingSettings(retries=args.retries)
    )
    records = load_records(args.payload_file)

    results = handle_batch(
        records,
        service=service,
        commit=lambda record: print(f"[COMMIT] offset={record.get('offset')}"),
        reject=lambda record, reason: print(
            f"[NO-COMMIT] offset={record.get('offset')} reason={reason}"
        ),
    )

    print("")
    print("[BATCH SUMMARY]")
    for result in results:
        meta = result["record_meta"]
        print(
            f"offset={meta['offset']} status={result['status']} "
            f"sent={result['sent']} error={result['error']}"
        )

    print("")
    print("[HISTORY]")
    print(f"all={len(service.list_all())}")
    print(f"delivered={len(service.list_by_status(True))}")
    print(f"failed={len(service.list_by_status(False))}")
    return 0 if all(result["sent"] for result in results) else 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Dispatch sample notification requests through console providers."
    )
    parser.add_argument(
        "--payload-file",
        type=Path,
        default=None,
        help="Optional JSON file holding a list of notifications.requested payloads.",
    )
    parser.add_argument("--retries", type=int, default=5, help="Attempts per send.")
    return parser.parse_args()


def load_records(payload_file: Path | None) -> list[dict[str, Any]]:
    payloads = sample_payloads()
    if payload_file is not None:
        with payload_file.open("r", encoding="utf-8") as file_handle:
            payloads = json.load(file_handle)
    return [
        {"topic": "notifications.requested", "partition": 0, "offset": offset, "value": payload}
        for offset, payload in enumerate(payloads)
    ]


def sample_payloads() -> list[dict[str, Any]]:
    return [
        {
            "event_id": "evt-demo-1",
            "channel": "email",
            "message": {
                "to": "user@example.com",
                "subject": "Welcome",
                "body": "Thanks for signing up.",
            },
        },
        {
            "event_id": "evt-demo-2",
            "channel": "sms",
            "message": {"from": "Acme", "to": "08031234567", "body": "Your code is 1234."},
        },
        {
            "event_id": "evt-demo-3",
            "channel": "sms",
            "message": {"from": "Acme", "to": "0803", "body": "Too short to route."},
        },
    ]


if __name__ == "__main__":
    sys.exit(main())
