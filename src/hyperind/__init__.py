from __future__ import annotations

from .abi_events import make_hypermap_registry
from .constants import HYPERMAP_ADDRESS, HYPERMAP_START_BLOCK, ROOT_HASH, UNRESOLVED_MARKER, ZERO_ADDRESS
from .core.config import BuildStateConfig
from .core.errors import DecodeError, EventProcessingError, FetchError, MalformedInputError
from .core.models import DecodedEvent, Entry, EventLog, Record
from .decoding.decoder import decode_event, decode_logs
from .state.reducer import NamespaceState, post_filter, reduce_events, sequence_events

__all__ = [
    "make_hypermap_registry",
    "decode_event",
    "decode_logs",
    "sequence_events",
    "reduce_events",
    "post_filter",
    "NamespaceState",
    "BuildStateConfig",
    "DecodedEvent",
    "Entry",
    "EventLog",
    "Record",
    "FetchError",
    "DecodeError",
    "EventProcessingError",
    "MalformedInputError",
    "HYPERMAP_ADDRESS",
    "HYPERMAP_START_BLOCK",
    "ROOT_HASH",
    "UNRESOLVED_MARKER",
    "ZERO_ADDRESS",
]
