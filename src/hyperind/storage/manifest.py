from __future__ import annotations

import asyncio
import os
from pathlib import Path

from hyperind.core.models import ChunkRecord


class LiveManifest:
    """Append-only JSONL journal of chunk fetch status.

    Each append is flushed and fsynced so a crashed run still shows which
    chunks were fetched and which one failed.
    """

    def __init__(self, path: Path | str) -> None:
        """Create the manifest file (and its directory) if missing.

        Args:
            path: File path for the manifest JSONL file
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self._lock = asyncio.Lock()

    async def append(self, rec: ChunkRecord) -> None:
        """Append a chunk record to the manifest atomically."""
        line = rec.to_json_line()
        async with self._lock:
            await asyncio.to_thread(self._write_line, self.path, line)

    @staticmethod
    def _write_line(path: Path, line: str) -> None:
        """Write a line to file with immediate flush and sync."""
        with open(path, "a", buffering=1) as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
