"""Core data models, configuration, interfaces and errors.

This package provides:
- Data models (EventLog, DecodedEvent, Entry, Record, ChunkRecord, Column)
- Configuration (BuildStateConfig)
- Error taxonomy (FetchError, DecodeError, EventProcessingError, MalformedInputError)
"""

from hyperind.core.config import BuildStateConfig
from hyperind.core.errors import (
    DecodeError,
    EventProcessingError,
    FetchError,
    HyperIndError,
    MalformedInputError,
)
from hyperind.core.models import ChunkRecord, Column, DecodedEvent, Entry, EventLog, Record

__all__ = [
    "BuildStateConfig",
    "ChunkRecord",
    "Column",
    "DecodedEvent",
    "Entry",
    "EventLog",
    "Record",
    "HyperIndError",
    "FetchError",
    "DecodeError",
    "EventProcessingError",
    "MalformedInputError",
]
