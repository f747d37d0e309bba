from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from hyperind.constants import DEFAULT_DELAY_S, DEFAULT_STEP, HYPERMAP_ADDRESS, HYPERMAP_START_BLOCK


@dataclass(frozen=True)
class BuildStateConfig:
    """Configuration for a full state-building run."""

    rpc_url: str
    address: str = HYPERMAP_ADDRESS
    start_block: int | str = HYPERMAP_START_BLOCK
    end_block: int | str = "latest"
    step: int = DEFAULT_STEP
    delay_s: float = DEFAULT_DELAY_S
    timeout_s: int = 20
    out_dir: Path = Path(".")
    # Optional outputs
    manifest_path: Path | None = None  # JSONL chunk journal
    events_out: Path | None = None  # decoded events as Parquet
