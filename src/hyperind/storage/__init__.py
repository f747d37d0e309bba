"""Storage components for manifests, state snapshots and event exports.

This package provides:
- LiveManifest: append-only JSONL journal of chunk status
- write_state_file / read_state_file: JSON namespace snapshots
- write_events_parquet: decoded events as a Parquet table
"""

from hyperind.storage.events import write_events_parquet
from hyperind.storage.manifest import LiveManifest
from hyperind.storage.state_file import read_state_file, state_file_name, write_state_file

__all__ = [
    "LiveManifest",
    "read_state_file",
    "state_file_name",
    "write_events_parquet",
    "write_state_file",
]
