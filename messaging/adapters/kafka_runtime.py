"""Kafka transport adapters for publishing and consuming notification requests.

Mental model refresher:
- This module is transport glue to Kafka itself.
- Each polled Kafka message becomes a plain record dict and goes through the
  consumer-handler flow, which calls the notification service and records
  the outcome.
- Offsets are committed manually: after a send is accepted, or after a
  failed record has been parked on the dead-letter topic. A record that
  could not be parked stays uncommitted and is redelivered.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Iterator, Mapping

from ..application.service import NotificationService
from .consumer_handler import Record, handle_message
from .settings import KafkaSettings, load_kafka_settings_from_env


def publish_notification_request(
    payload: Mapping[str, Any],
    *,
    topic: str | None = None,
    settings: KafkaSettings | None = None,
) -> dict[str, Any]:
    """Publish one `notifications.requested` event and return its position."""
    _KafkaConsumer, KafkaProducer, _TopicPartition, _OffsetAndMetadata = _import_kafka_python()
    kafka = settings or load_kafka_settings_from_env()

    producer = _json_producer(KafkaProducer, kafka)
    try:
        metadata = producer.send(topic or kafka.topic, value=dict(payload)).get(
            timeout=kafka.send_timeout_seconds
        )
        producer.flush(timeout=kafka.send_timeout_seconds)
    finally:
        producer.close()

    return {"topic": metadata.topic, "partition": metadata.partition, "offset": metadata.offset}


class DeadLetterQueue:
    """Parks records that could not be sent on the dead-letter topic."""

    def __init__(self, producer: Any, topic: str, timeout_seconds: float) -> None:
        self._producer = producer
        self.topic = topic
        self._timeout_seconds = timeout_seconds

    def park(self, record: Record, reason: str) -> bool:
        """Publish the failed record. Returns False when the broker did not ack."""
        try:
            metadata = self._producer.send(
                self.topic, value=build_dead_letter(record, reason)
            ).get(timeout=self._timeout_seconds)
        except Exception as exc:
            print(f"[DLQ ERROR] {_describe(record)} reason={reason} error={exc}")
            return False

        print(
            f"[DLQ] {_describe(record)} dlq_partition={metadata.partition} "
            f"dlq_offset={metadata.offset} reason={reason}"
        )
        return True

    def close(self) -> None:
        _close_quietly("dlq_producer.flush", lambda: self._producer.flush(timeout=self._timeout_seconds))
        _close_quietly("dlq_producer", self._producer.close)


def run_notification_worker_forever(
    service: NotificationService,
    settings: KafkaSettings | None = None,
) -> int:
    """Run the Kafka consumer loop that dispatches notification requests.

    The service (and so its provider clients) is built once by the caller
    before the first record is polled.
    """
    KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata = _import_kafka_python()
    kafka = settings or load_kafka_settings_from_env()

    consumer = KafkaConsumer(
        kafka.topic,
        bootstrap_servers=list(kafka.bootstrap_servers),
        group_id=kafka.group_id,
        enable_auto_commit=False,
        auto_offset_reset=kafka.auto_offset_reset,
    )
    dead_letters = (
        DeadLetterQueue(
            _json_producer(KafkaProducer, kafka),
            kafka.dead_letter_topic,
            kafka.dlq_send_timeout_seconds,
        )
        if kafka.dlq_enabled
        else None
    )
    print(
        f"[WORKER START] topic={kafka.topic} group_id={kafka.group_id} "
        f"dlq_topic={dead_letters.topic if dead_letters else None}"
    )

    def commit(record: Record) -> None:
        position = TopicPartition(record["topic"], record["partition"])
        consumer.commit(
            offsets={position: _offset_and_metadata(OffsetAndMetadata, record["offset"] + 1)}
        )
        print(f"[COMMIT] {_describe(record)}")

    def reject(record: Record, reason: str) -> None:
        if dead_letters is not None and dead_letters.park(record, reason):
            commit(record)
            return
        print(f"[NO-COMMIT] {_describe(record)} reason={reason}")

    try:
        while True:
            for raw in _poll_records(consumer, kafka):
                try:
                    record = {**raw, "value": _decode_json_object(raw["value"])}
                except ValueError as exc:
                    reject(raw, f"decode_failed: {exc}")
                    continue

                result = handle_message(record, service=service, commit=commit, reject=reject)
                print(
                    f"[RESULT] {_describe(record)} status={result['status']} "
                    f"sent={result['sent']} error={result['error']}"
                )
    except KeyboardInterrupt:
        print("[WORKER STOP] received keyboard interrupt")
        return 0
    except Exception as exc:
        print(f"[WORKER ERROR] {exc}")
        return 1
    finally:
        _close_quietly("consumer", consumer.close)
        if dead_letters is not None:
            dead_letters.close()


def build_dead_letter(record: Record, reason: str) -> dict[str, Any]:
    value = record.get("value")
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    dead_letter = {
        "event_type": f"{record['topic']}.dlq",
        "failed_at": datetime.now(tz=UTC).isoformat(),
        "failure_reason": reason,
        "source": {
            "topic": record["topic"],
            "partition": record["partition"],
            "offset": record["offset"],
        },
        "payload": value,
    }
    if isinstance(value, Mapping) and isinstance(value.get("event_id"), str):
        dead_letter["source_event_id"] = value["event_id"]
    return dead_letter


def _poll_records(consumer: Any, kafka: KafkaSettings) -> Iterator[dict[str, Any]]:
    batches = consumer.poll(timeout_ms=kafka.poll_timeout_ms, max_records=kafka.max_records)
    for messages in (batches or {}).values():
        for message in messages:
            yield {
                "topic": message.topic,
                "partition": int(message.partition),
                "offset": int(message.offset),
                "value": message.value,
            }


def _import_kafka_python() -> tuple[Any, Any, Any, Any]:
    try:
        from kafka import KafkaConsumer, KafkaProducer, TopicPartition
        from kafka.structs import OffsetAndMetadata
    except Exception as exc:
        raise RuntimeError(
            "Kafka support requires `kafka-python`. Install with: pip install kafka-python"
        ) from exc
    return KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata


def _json_producer(producer_type: Any, kafka: KafkaSettings) -> Any:
    return producer_type(
        bootstrap_servers=list(kafka.bootstrap_servers),
        value_serializer=_serialize_json_object,
        acks=kafka.producer_acks,
    )


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":"), default=_json_fallback).encode("utf-8")


def _json_fallback(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return repr(value)


def _decode_json_object(raw: bytes | str) -> dict[str, Any]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not isinstance(raw, str):
        raise ValueError(f"Unsupported Kafka payload type: {type(raw).__name__}")

    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Kafka payload must decode to a JSON object")
    return parsed


def _describe(record: Record) -> str:
    return f"topic={record['topic']} partition={record['partition']} offset={record['offset']}"


def _close_quietly(name: str, close: Any) -> None:
    try:
        close()
    except Exception as exc:
        print(f"[WORKER CLEANUP ERROR] resource={name} error={exc}")


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    # kafka-python >= 2.1 added leader_epoch as a third field.
    try:
        return offset_and_metadata_type(offset, "", -1)
    except TypeError:
        return offset_and_metadata_type(offset, "")
