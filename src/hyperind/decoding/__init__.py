"""Event decoding and payload interpretation.

This package provides:
- Event specification system (EventSpec, TopicFieldSpec, DataFieldSpec)
- Generic decoder that translates raw logs into DecodedEvent objects
- Registry management for event specs
- Byte interpreters for note/fact payloads (text, IP addresses, ports)
"""

from hyperind.decoding.specs import (
    DataFieldSpec,
    EventRegistry,
    EventSpec,
    TopicFieldSpec,
)
from hyperind.decoding.decoder import DecodeReport, decode_event, decode_logs
from hyperind.decoding.interpret import (
    decode_ip,
    decode_uint,
    decode_utf8_safe,
    interpret,
    token_id_to_namehash,
)
from hyperind.decoding.registry import EventRegistryProvider, add_event_spec

__all__ = [
    "DecodeReport",
    "decode_event",
    "decode_logs",
    "decode_ip",
    "decode_uint",
    "decode_utf8_safe",
    "interpret",
    "token_id_to_namehash",
    "EventRegistryProvider",
    "add_event_spec",
    "DataFieldSpec",
    "EventRegistry",
    "EventSpec",
    "TopicFieldSpec",
]
