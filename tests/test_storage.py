import json
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from hyperind.constants import ROOT_HASH
from hyperind.core.models import ChunkRecord, Entry, Record
from hyperind.storage import LiveManifest, read_state_file, write_events_parquet, write_state_file

from conftest import event, h32


@pytest.mark.asyncio
async def test_manifest_appends_json_lines(tmp_path: Path) -> None:
    manifest = LiveManifest(tmp_path / "nested" / "manifest.jsonl")

    await manifest.append(ChunkRecord(0, 9, "started", 0, None, 0, 1.0))
    await manifest.append(ChunkRecord(0, 9, "done", 1, None, 4, 2.0))

    lines = (tmp_path / "nested" / "manifest.jsonl").read_text().splitlines()
    assert [json.loads(line)["status"] for line in lines] == ["started", "done"]
    assert json.loads(lines[1])["logs"] == 4


def test_state_file_uses_external_field_names(tmp_path: Path) -> None:
    root = Entry.root()
    root.children = {h32(2), h32(1)}
    child = Entry(namehash=h32(1), label="a", parent_hash=ROOT_HASH, full_name="a", creation_block=5, last_update_block=6)
    child.add_record(
        "notes", "~port", Record(value=2**60, raw_bytes="0x1000000000000000", block_number=6, tx_hash="0xt", log_index=0, event_hash=None)
    )

    path = write_state_file({ROOT_HASH: root, h32(1): child}, tmp_path, 123)
    saved = read_state_file(path)

    assert path.name == "hypermapState_123.json"
    assert saved[ROOT_HASH]["children"] == [h32(1), h32(2)]
    entry = saved[h32(1)]
    assert entry["fullName"] == "a"
    assert entry["parentHash"] == ROOT_HASH
    assert (entry["creationBlock"], entry["lastUpdateBlock"]) == (5, 6)
    # beyond the JSON-safe integer range values are written as strings
    assert entry["notes"]["~port"][0]["value"] == str(2**60)
    assert entry["notes"]["~port"][0]["rawBytes"] == "0x1000000000000000"


def test_read_state_file_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("[]")

    with pytest.raises(ValueError):
        read_state_file(path)


def test_events_parquet_is_sorted_with_dynamic_columns(tmp_path: Path) -> None:
    events = [
        event("Gene", 9, 0, entry=h32(1), gene="0xg"),
        event("Mint", 3, 2, parenthash=ROOT_HASH, childhash=h32(1), label="0x61"),
        event("Transfer", 3, 1, **{"from": "0x0", "to": "0x1", "id": str(2**200)}),
    ]

    rows = write_events_parquet(events, tmp_path / "ev" / "events.parquet")
    table = pq.read_table(tmp_path / "ev" / "events.parquet")

    assert rows == 3
    assert table.column("event").to_pylist() == ["Transfer", "Mint", "Gene"]
    assert table.column("id").to_pylist() == [str(2**200), None, None]
    assert table.column("gene").to_pylist() == [None, None, "0xg"]
