"""Decoding utilities: typed parsers for indexed topics and ABI-decoded data values."""

from __future__ import annotations

from typing import Any

from .specs import TopicFieldSpec


def parse_topic_field(topic_hex: str, spec: TopicFieldSpec) -> Any:
    """Parse one indexed topic according to the declared type.

    Dynamic types (`bytes`, `string`) are only present as their hash, so they
    keep the raw topic value like `bytes32` does.
    """
    t = spec.type
    h = topic_hex.lower()
    if t == "address":
        return "0x" + h[-40:]
    if t.startswith("uint"):
        return str(int(h, 16))
    return h


def normalize_data_value(value: Any, typ: str) -> Any:
    """Normalize one eth_abi-decoded value to its external representation."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if typ == "address":
        return str(value).lower()
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value
