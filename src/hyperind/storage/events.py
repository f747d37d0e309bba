from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pyarrow.parquet as pq

from hyperind.core.models import Column, DecodedEvent


def events_to_column(events: Iterable[DecodedEvent]) -> Column:
    """Buffer decoded events column-wise (one string column per parameter)."""
    buf = Column.empty()
    for ev in events:
        buf.append_event(ev)
    return buf


def write_events_parquet(events: Iterable[DecodedEvent], path: Path, *, codec: str = "zstd") -> int:
    """Write decoded events to a single Parquet file; return the row count."""
    table = events_to_column(events).to_arrow_table()
    path.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(table, path, compression=codec)
    return table.num_rows
