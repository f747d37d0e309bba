"""Generic event decoder.

This module translates raw logs into `DecodedEvent` using an `EventRegistry`
of `EventSpec` (topic fields + data fields). Indexed fields come from the
topics; non-indexed fields are ABI tuple-decoded from the data payload with
eth_abi. A log whose topic0 is not in the registry is silently skipped; a
log that fails to decode is logged and dropped as a whole.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import decode as abi_decode
from eth_utils import decode_hex

from hyperind.core.errors import DecodeError
from hyperind.core.models import DecodedEvent, EventLog
from hyperind.decoding.specs import EventRegistry, EventSpec
from hyperind.decoding.utils import normalize_data_value, parse_topic_field

logger = logging.getLogger(__name__)


# ---------- report ----------


@dataclass(kw_only=True)
class DecodeReport:
    """Counters for one batch decode."""

    decoded: int = 0
    unknown: int = 0
    failed: int = 0


# ---------- helper functions ----------


def _get_spec(topics: Sequence[str], registry: EventRegistry) -> EventSpec | None:
    """Return the spec for topic0, or None if topics are empty or unknown."""
    if not topics or not topics[0]:
        return None
    return registry.get(topics[0].lower())


def _parse_topics(spec: EventSpec, topics: Sequence[str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for tf in spec.topic_fields:
        # a short log yields None for the missing field, not a failure
        topic = topics[tf.index] if tf.index < len(topics) else None
        values[tf.name] = parse_topic_field(topic, tf) if topic else None
    return values


def _parse_data(spec: EventSpec, data_hex: str) -> dict[str, Any]:
    if not spec.data_fields:
        return {}

    data = decode_hex(data_hex) if data_hex else b""
    if not data:
        return {df.name: ("0x" if df.type == "bytes" else None) for df in spec.data_fields}

    decoded = abi_decode(spec.data_types, data)
    return {
        df.name: normalize_data_value(decoded[df.position], df.type)
        for df in spec.data_fields
    }


# ---------- main decoder ----------


def decode_log(log: EventLog, spec: EventSpec) -> DecodedEvent:
    """Decode one log against a known spec; raise `DecodeError` on failure."""
    try:
        parameters = _parse_topics(spec, log.topics)
        parameters.update(_parse_data(spec, log.data_hex))
    except Exception as e:
        raise DecodeError(f"cannot decode {spec.name} at tx {log.tx_hash}: {e}") from e

    return DecodedEvent(
        name=spec.name,
        block_number=log.block_number,
        tx_hash=log.tx_hash,
        log_index=log.log_index,
        parameters=parameters,
    )


def decode_event(log: EventLog, registry: EventRegistry) -> DecodedEvent | None:
    """Decode a raw log into a `DecodedEvent`, or return None if it is skipped.

    Unknown signatures return None without logging; decode failures are
    logged with the signature and transaction before returning None.
    """
    spec = _get_spec(log.topics, registry)
    if spec is None:
        return None
    try:
        return decode_log(log, spec)
    except DecodeError as e:
        logger.warning("dropping log %s (sig %s): %s", log.log_index, spec.signature, e)
        return None


def decode_logs(
    logs: Iterable[EventLog],
    registry: EventRegistry,
) -> tuple[list[DecodedEvent], DecodeReport]:
    """Decode a batch of logs, preserving arrival order."""
    report = DecodeReport()
    events: list[DecodedEvent] = []
    for log in logs:
        spec = _get_spec(log.topics, registry)
        if spec is None:
            report.unknown += 1
            continue
        try:
            events.append(decode_log(log, spec))
        except DecodeError as e:
            report.failed += 1
            logger.warning("dropping log %s (sig %s): %s", log.log_index, spec.signature, e)
            continue
        report.decoded += 1
    return events, report
