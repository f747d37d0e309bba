"""Event-sourced Hypermap namespace state.

This module provides:
- `sequence_events`: the deterministic replay order (block, log index).
- `NamespaceState`: entries keyed by namehash plus a name-lookup side table,
  folded one event at a time with `apply`.
- `reduce_events`: fold a sequenced batch into a fresh (or given) state.
- `post_filter`: the caller-visible projection of fully named entries.

Design notes
------------
- Entries live in one mapping keyed by namehash; parent/child links are
  hashes, never object references.
- The name-lookup table is written by Mint only and lets a name resolve
  before any Entry exists for an ancestor.
- A failing event is logged and skipped; it never aborts the fold.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from hyperind.constants import MAX_NAME_DEPTH, ROOT_HASH, UNRESOLVED_MARKER, ZERO_ADDRESS
from hyperind.core.errors import EventProcessingError, MalformedInputError
from hyperind.core.models import DecodedEvent, Entry, Record
from hyperind.decoding.interpret import decode_utf8_safe, interpret, token_id_to_namehash

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 500


@dataclass(slots=True, frozen=True)
class NameRecord:
    """Label and parent of a minted hash, as recorded by its Mint."""

    label: str
    parent_hash: str | None


def sequence_events(events: Iterable[DecodedEvent]) -> list[DecodedEvent]:
    """Return events in replay order: block number, then log index, ascending."""
    return sorted(events, key=lambda ev: ev.sort_key)


def is_resolved_name(full_name: str) -> bool:
    return bool(full_name) and UNRESOLVED_MARKER not in full_name


class NamespaceState:
    """Mutable namespace state folded from sequenced events."""

    def __init__(self) -> None:
        self.entries: dict[str, Entry] = {ROOT_HASH: Entry.root()}
        self.name_lookup: dict[str, NameRecord] = {ROOT_HASH: NameRecord("", None)}
        self.processed = 0
        self.errors = 0

    # ---------- entries ----------

    def get_or_create(self, namehash: str | None, block_number: int) -> Entry:
        """Return the entry for `namehash`, creating it on first reference."""
        if not namehash:
            raise MalformedInputError("event references an empty namehash")
        key = namehash.lower()
        entry = self.entries.get(key)
        if entry is None:
            known = self.name_lookup.get(key)
            entry = Entry(
                namehash=key,
                label=known.label if known else "",
                parent_hash=known.parent_hash if known else None,
                creation_block=block_number,
                last_update_block=block_number,
            )
            self.entries[key] = entry
        entry.touch(block_number)
        return entry

    # ---------- names ----------

    def resolve_full_name(self, namehash: str) -> tuple[str, bool]:
        """Walk the lookup table from `namehash` to the root.

        Returns `(full_name, resolved)`. Labels are joined root-first and
        empty labels contribute no segment. A broken chain, or one needing
        `MAX_NAME_DEPTH` hops or more (cycles included), is unresolved: the partial
        path gets the unresolved marker appended, or is empty if no label was
        collected.
        """
        parts: list[str] = []
        current: str | None = namehash
        hops = 0
        while current is not None and current != ROOT_HASH:
            if hops >= MAX_NAME_DEPTH:
                break
            rec = self.name_lookup.get(current)
            if rec is None:
                break
            if rec.label:
                parts.append(rec.label)
            current = rec.parent_hash
            hops += 1

        path = ".".join(reversed(parts))
        if current == ROOT_HASH and hops < MAX_NAME_DEPTH:
            return path, True
        return (f"{path}.{UNRESOLVED_MARKER}" if path else ""), False

    # ---------- handlers ----------

    def _on_mint(self, ev: DecodedEvent) -> None:
        p = ev.parameters
        parent_hash = (p.get("parenthash") or "").lower() or None
        child_hash = (p.get("childhash") or "").lower()
        label = decode_utf8_safe(p.get("label") or "0x")

        if child_hash:
            self.name_lookup[child_hash] = NameRecord(label, parent_hash)
        entry = self.get_or_create(child_hash, ev.block_number)
        entry.label = label
        entry.parent_hash = parent_hash

        full_name, resolved = self.resolve_full_name(entry.namehash)
        entry.full_name = full_name
        if not resolved:
            logger.warning(
                "name reconstruction failed for %s at block %s", entry.namehash, ev.block_number
            )
            return

        parent = self.entries.get(parent_hash) if parent_hash else None
        if parent is None:
            logger.warning(
                "parent %s not found for child %s at block %s",
                parent_hash, entry.namehash, ev.block_number,
            )
            return
        parent.children.add(entry.namehash)
        parent.touch(ev.block_number)

    def _on_record(self, ev: DecodedEvent) -> None:
        """Note and Fact: append to the parent's `notes` / `facts` bucket."""
        p = ev.parameters
        if ev.name == "Note":
            bucket, hash_key = "notes", "notehash"
        else:
            bucket, hash_key = "facts", "facthash"

        label = decode_utf8_safe(p.get("label") or "0x")
        parent = self.get_or_create(p.get("parenthash"), ev.block_number)
        data = p.get("data") or "0x"
        parent.add_record(
            bucket,
            label,
            Record(
                value=interpret(label, data),
                raw_bytes=data,
                block_number=ev.block_number,
                tx_hash=ev.tx_hash,
                log_index=ev.log_index,
                event_hash=p.get(hash_key),
            ),
        )

    def _on_transfer(self, ev: DecodedEvent) -> None:
        p = ev.parameters
        try:
            namehash = token_id_to_namehash(p.get("id"))
        except MalformedInputError as e:
            logger.warning("skipping Transfer at block %s: %s", ev.block_number, e)
            return

        entry = self.get_or_create(namehash, ev.block_number)
        entry.owner = p.get("to")
        if (p.get("from") or "").lower() == ZERO_ADDRESS:
            if not entry.creation_block or entry.creation_block > ev.block_number:
                entry.creation_block = ev.block_number

    def _on_gene(self, ev: DecodedEvent) -> None:
        entry = self.get_or_create(ev.parameters.get("entry"), ev.block_number)
        entry.gene = ev.parameters.get("gene")

    # ---------- fold ----------

    def apply(self, ev: DecodedEvent) -> None:
        """Apply one event. Failures are logged with event context and skipped."""
        try:
            match ev.name:
                case "Mint":
                    self._on_mint(ev)
                case "Note" | "Fact":
                    self._on_record(ev)
                case "Transfer":
                    self._on_transfer(ev)
                case "Gene":
                    self._on_gene(ev)
                case "Zero" | "Upgraded":
                    pass
                case _:
                    logger.debug("no handler for event %s", ev.name)
        except Exception as e:
            self.errors += 1
            err = EventProcessingError(
                f"error processing {ev.name} at block {ev.block_number}, "
                f"tx {ev.tx_hash}, logIndex {ev.log_index}: {e}"
            )
            logger.error("%s (parameters=%r)", err, ev.parameters, exc_info=e)
        self.processed += 1


def reduce_events(
    events: Iterable[DecodedEvent],
    state: NamespaceState | None = None,
    *,
    on_progress: Callable[[int], None] | None = None,
) -> NamespaceState:
    """Fold already-sequenced events into `state` (a fresh one by default).

    `on_progress` receives the running count every `PROGRESS_EVERY` events.
    """
    state = state if state is not None else NamespaceState()
    for ev in events:
        state.apply(ev)
        if on_progress is not None and state.processed % PROGRESS_EVERY == 0:
            on_progress(state.processed)
    return state


def post_filter(entries: dict[str, Entry]) -> dict[str, Entry]:
    """Keep the root and every entry with a fully resolved name (copied)."""
    return {
        h: entry.copy()
        for h, entry in entries.items()
        if entry.is_root or is_resolved_name(entry.full_name)
    }
