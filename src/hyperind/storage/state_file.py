"""JSON snapshot of the filtered namespace state.

The file maps namehash → serialized Entry and is named after the last block
covered by the run: `hypermapState_{block}.json`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from hyperind.core.models import Entry


def state_file_name(block_number: int) -> str:
    return f"hypermapState_{block_number}.json"


def state_to_dict(entries: dict[str, Entry]) -> dict[str, dict[str, Any]]:
    return {h: entry.to_dict() for h, entry in entries.items()}


def write_state_file(entries: dict[str, Entry], out_dir: Path, block_number: int) -> Path:
    """Write the state as pretty-printed JSON and return the file path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / state_file_name(block_number)
    path.write_text(json.dumps(state_to_dict(entries), indent=2))
    return path


def read_state_file(path: Path) -> dict[str, dict[str, Any]]:
    """Load a state file written by `write_state_file` (plain dicts)."""
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path} is not a namespace state file")
    return data
