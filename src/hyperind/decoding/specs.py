"""Event specification primitives and registry typing.

Defines lightweight dataclasses to describe how to decode events:
- `TopicFieldSpec` / `DataFieldSpec`: typed sources for indexed topics / data fields
- `EventSpec`: one event rule (topic0, canonical signature, ordered fields)
- `EventRegistry`: mapping from topic0 → EventSpec
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TopicFieldSpec:
    """Describe one indexed field (by 0-based topic index and ABI type)."""

    name: str
    index: int  # topic index, 1.. (topic 0 is the signature hash)
    type: str  # e.g., "address", "uint256", "bytes32", "bytes"


@dataclass(frozen=True)
class DataFieldSpec:
    """Describe one non-indexed field, ABI-encoded in the data payload."""

    name: str
    position: int  # 0-based position in the non-indexed tuple
    type: str  # e.g., "bytes", "address", "uint256"


@dataclass(frozen=True)
class EventSpec:
    """One event decoding rule."""

    topic0: str
    name: str
    signature: str  # canonical "Name(type,type,...)"
    topic_fields: list[TopicFieldSpec]
    data_fields: list[DataFieldSpec]

    @property
    def data_types(self) -> list[str]:
        return [df.type for df in self.data_fields]


# The full registry keyed by topic0 (lowercased 0x-hex).
EventRegistry = dict[str, EventSpec]
