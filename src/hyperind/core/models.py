"""Core data models for the Hypermap state pipeline.

This module defines:
- `EventLog`: raw log as fetched from the node.
- `DecodedEvent`: a log decoded against the Hypermap event table.
- `Record` / `Entry`: namespace nodes and their note/fact history.
- `ChunkRecord`: manifest entry for one fetched block chunk.
- `Column`: append-only columnar buffer used to export decoded events.

Design notes
------------
- Hashes and addresses are lowercase 0x-prefixed hex strings throughout.
- Entries reference parents and children by namehash only.
- Dynamic columns are stored as strings for Arrow safety (big ints, hex).
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Literal

import pyarrow as pa

from hyperind.constants import MAX_SAFE_INTEGER, ROOT_HASH

EventName = Literal["Mint", "Note", "Fact", "Transfer", "Gene", "Zero", "Upgraded"]

Status = Literal["started", "done", "failed"]


def json_safe(value: Any) -> Any:
    """Return `value` with integers outside the safe range as decimal strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and abs(value) > MAX_SAFE_INTEGER:
        return str(value)
    return value


# === RPC record ===


@dataclass(slots=True, frozen=True)
class EventLog:
    """Raw log as fetched from RPC, minimally normalized."""

    address: str  # lowercased 0x...
    topics: tuple[str, ...]  # lowercased 0x...
    data_hex: str  # "0x..."
    block_number: int
    tx_hash: str  # lowercased 0x...
    log_index: int


# === Decoded event ===


@dataclass(slots=True, frozen=True)
class DecodedEvent:
    """A typed, named Hypermap event.

    `parameters` maps ABI parameter names to addresses, 32-byte hashes, byte
    strings (all 0x hex) or decimal-string unsigned integers. Missing values
    are None.
    """

    name: EventName
    block_number: int
    tx_hash: str
    log_index: int
    parameters: dict[str, Any]

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.block_number, self.log_index)


# === Namespace state ===


@dataclass(slots=True, frozen=True)
class Record:
    """One timestamped note or fact value."""

    value: Any
    raw_bytes: str
    block_number: int
    tx_hash: str
    log_index: int
    event_hash: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": json_safe(self.value),
            "rawBytes": self.raw_bytes,
            "blockNumber": self.block_number,
            "txHash": self.tx_hash,
            "logIndex": self.log_index,
            "eventHash": self.event_hash,
        }


def _newest_first(rec: Record) -> tuple[int, int]:
    return (-rec.block_number, -rec.log_index)


@dataclass(slots=True)
class Entry:
    """A namespace node keyed by its namehash."""

    namehash: str
    label: str = ""
    parent_hash: str | None = None
    full_name: str = ""
    owner: str | None = None
    gene: str | None = None
    notes: dict[str, list[Record]] = field(default_factory=dict)
    facts: dict[str, list[Record]] = field(default_factory=dict)
    children: set[str] = field(default_factory=set)
    creation_block: int = 0
    last_update_block: int = 0

    @classmethod
    def root(cls) -> Entry:
        return cls(namehash=ROOT_HASH)

    @property
    def is_root(self) -> bool:
        return self.namehash == ROOT_HASH

    def touch(self, block_number: int) -> None:
        """Bump `last_update_block` to at least `block_number`."""
        self.last_update_block = max(self.last_update_block, block_number)

    def add_record(self, bucket: Literal["notes", "facts"], label: str, rec: Record) -> None:
        """Append a note/fact record and keep the label's history newest-first."""
        history = getattr(self, bucket).setdefault(label, [])
        history.append(rec)
        history.sort(key=_newest_first)

    def copy(self) -> Entry:
        return Entry(
            namehash=self.namehash,
            label=self.label,
            parent_hash=self.parent_hash,
            full_name=self.full_name,
            owner=self.owner,
            gene=self.gene,
            notes={k: list(v) for k, v in self.notes.items()},
            facts={k: list(v) for k, v in self.facts.items()},
            children=set(self.children),
            creation_block=self.creation_block,
            last_update_block=self.last_update_block,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the external (camelCase) field names."""
        return {
            "namehash": self.namehash,
            "label": self.label,
            "parentHash": self.parent_hash,
            "fullName": self.full_name,
            "owner": self.owner,
            "gene": self.gene,
            "notes": {k: [r.to_dict() for r in v] for k, v in self.notes.items()},
            "facts": {k: [r.to_dict() for r in v] for k, v in self.facts.items()},
            "children": sorted(self.children),
            "creationBlock": self.creation_block,
            "lastUpdateBlock": self.last_update_block,
        }


# === Manifest record ===


@dataclass(slots=True)
class ChunkRecord:
    """A single chunk execution record persisted to the live manifest."""

    from_block: int
    to_block: int
    status: Status
    attempts: int
    error: str | None
    logs: int  # raw logs fetched
    updated_at: float

    def to_json_line(self) -> str:
        """Serialize as a compact JSON line."""
        return json.dumps(asdict(self), separators=(",", ":")) + "\n"


# === Decoded event buffer ===

_BASE_FIELDS: list[tuple[str, pa.DataType]] = [
    ("block_number", pa.uint64()),
    ("log_index", pa.uint64()),
    ("tx_hash", pa.string()),
    ("event", pa.string()),
]


@dataclass(slots=True)
class Column:
    """Dynamic columnar buffer of decoded events.

    - Base columns are always present and strongly typed.
    - Every event parameter becomes its own string column, created lazily
      and padded with None for events that do not carry it.
    """

    block_number: list[int] = field(default_factory=list)
    log_index: list[int] = field(default_factory=list)
    tx_hash: list[str] = field(default_factory=list)
    event: list[str] = field(default_factory=list)

    dyn: dict[str, list[str | None]] = field(default_factory=dict)
    _rows: int = 0

    @staticmethod
    def empty() -> Column:
        """Return an empty buffer."""
        return Column()

    def _ensure_dyn_col(self, name: str) -> list[str | None]:
        """Ensure a dynamic column exists and is aligned to current row count."""
        col = self.dyn.get(name)
        if col is None:
            col = [None] * self._rows
            self.dyn[name] = col
        return col

    def append_event(self, ev: DecodedEvent) -> None:
        """Append one decoded event; parameters become dynamic columns."""
        self.block_number.append(ev.block_number)
        self.log_index.append(ev.log_index)
        self.tx_hash.append(ev.tx_hash)
        self.event.append(ev.name)
        self._rows += 1
        for col in self.dyn.values():
            col.append(None)
        for k, v in ev.parameters.items():
            self._ensure_dyn_col(k)[-1] = None if v is None else str(v)

    def to_arrow_table(self) -> pa.Table:
        """Convert the buffer to a sorted Arrow table with deterministic schema."""
        fields = [pa.field(n, t) for n, t in _BASE_FIELDS]
        arrays: dict[str, pa.Array] = {
            "block_number": pa.array(self.block_number, type=pa.uint64()),
            "log_index": pa.array(self.log_index, type=pa.uint64()),
            "tx_hash": pa.array(self.tx_hash, type=pa.string()),
            "event": pa.array(self.event, type=pa.string()),
        }
        for name in sorted(self.dyn.keys()):
            fields.append(pa.field(name, pa.string()))
            arrays[name] = pa.array(self.dyn[name], type=pa.string())
        schema = pa.schema(fields)
        return pa.Table.from_pydict(arrays, schema=schema).sort_by(
            [("block_number", "ascending"), ("log_index", "ascending")]
        )
