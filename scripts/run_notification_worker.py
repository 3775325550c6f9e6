#!/usr/bin/env python3
"""Run the Kafka notification worker.

This worker consumes `notifications.requested`, sends each request through
SendGrid (email) or Twilio (SMS), and records the outcome in the message
store. Provider clients are built once, before the consumer starts.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from messaging.adapters.kafka_runtime import run_notification_worker_forever  # noqa: E402
from messaging.adapters.settings import load_env_file  # noqa: E402
from messaging.bootstrap import build_notification_service_from_env  # noqa: E402


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s %(message)s")
    load_env_file(REPO_ROOT / ".env")
    service = build_notification_service_from_env()
    return run_notification_worker_forever(service)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run Kafka consumer loop for email/SMS notification requests."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for dispatch diagnostics.",
    )
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(main())
