from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from hyperind.core.errors import FetchError
from hyperind.core.interfaces import (
    IEventRegistryProvider,
    ILogSource,
    IManifestRepository,
    ProgressCallback,
)
from hyperind.core.models import ChunkRecord, DecodedEvent, Entry, EventLog
from hyperind.decoding.decoder import decode_logs
from hyperind.orchestration.utils import iter_chunks, resolve_block_range
from hyperind.state.reducer import post_filter, reduce_events, sequence_events

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Domain configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuildStatePlan:
    """
    Domain-level parameters for one state-building run.

    This config is intentionally free of infrastructure concerns
    (no RPC URL, no filesystem paths, etc.).
    """

    address: str
    start_block: int | str
    end_block: int | str
    step: int
    delay_s: float


# ---------------------------------------------------------------------------
# Stats & result
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class BuildStats:
    """
    Aggregated counters for one run:
    - chunks fetched and raw logs collected
    - logs decoded / skipped as unknown / dropped as undecodable
    - events applied and events whose processing failed
    - entries before and after the post-filter
    """

    chunks_ok: int = 0
    raw_logs: int = 0
    decoded: int = 0
    unknown: int = 0
    decode_failed: int = 0
    processed: int = 0
    processing_errors: int = 0
    entries_total: int = 0
    entries_kept: int = 0

    @property
    def entries_removed(self) -> int:
        return self.entries_total - self.entries_kept


@dataclass(kw_only=True)
class BuildStateResult:
    """Filtered namespace plus what produced it."""

    entries: dict[str, Entry]
    events: list[DecodedEvent]
    stats: BuildStats
    latest_block: int


# ---------------------------------------------------------------------------
# Chunk record helpers
# ---------------------------------------------------------------------------


def _create_started_record(a: int, b: int) -> ChunkRecord:
    return ChunkRecord(
        from_block=a, to_block=b, status="started", attempts=0, error=None, logs=0, updated_at=time.time()
    )


def _create_done_record(a: int, b: int, logs: int) -> ChunkRecord:
    return ChunkRecord(
        from_block=a, to_block=b, status="done", attempts=1, error=None, logs=logs, updated_at=time.time()
    )


def _create_failed_record(a: int, b: int, error: str) -> ChunkRecord:
    return ChunkRecord(
        from_block=a, to_block=b, status="failed", attempts=1, error=error, logs=0, updated_at=time.time()
    )


def _no_progress(current: int, total: int, message: str) -> None:
    return None


# ---------------------------------------------------------------------------
# Domain service – BuildStateService
# ---------------------------------------------------------------------------


class BuildStateService:
    """
    Domain service for the fetch → decode → sequence → reduce → filter pipeline.

    It depends only on abstract providers (interfaces). Chunks are fetched
    strictly one at a time, with a fixed pause after each, and the whole run
    aborts with `FetchError` before any decoding if one chunk fails.
    """

    def __init__(
        self,
        logs_provider: ILogSource,
        registry_provider: IEventRegistryProvider,
    ) -> None:
        self._logs_provider = logs_provider
        self._registry_provider = registry_provider

    async def fetch_all(
        self,
        *,
        plan: BuildStatePlan,
        start: int,
        end: int,
        stats: BuildStats,
        manifest_repo: IManifestRepository | None = None,
        on_progress: ProgressCallback = _no_progress,
    ) -> list[EventLog]:
        """Collect every raw log in [start, end], chunk by chunk."""
        raw: list[EventLog] = []

        for a, b in iter_chunks(start, end, plan.step):
            on_progress(a, end, f"Processing blocks {a} - {b}")
            if manifest_repo is not None:
                await manifest_repo.append(_create_started_record(a, b))

            try:
                logs = await self._logs_provider.get_logs(
                    address=plan.address,
                    from_block=a,
                    to_block=b,
                )
            except Exception as e:
                reason = f"{type(e).__name__}: {e}"
                if manifest_repo is not None:
                    await manifest_repo.append(_create_failed_record(a, b, reason))
                raise FetchError(a, b, reason) from e

            raw.extend(logs)
            stats.chunks_ok += 1
            stats.raw_logs += len(logs)
            if manifest_repo is not None:
                await manifest_repo.append(_create_done_record(a, b, len(logs)))
            logger.info("fetched %d logs in blocks %d-%d, total raw %d", len(logs), a, b, len(raw))

            await asyncio.sleep(plan.delay_s)

        return raw

    async def run(
        self,
        *,
        plan: BuildStatePlan,
        manifest_repo: IManifestRepository | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BuildStateResult:
        """
        Execute a full run.

        Parameters
        ----------
        plan : BuildStatePlan
            Contract address, block range, chunk size and inter-chunk delay.
        manifest_repo : IManifestRepository | None
            Optional journal for chunk status records.
        on_progress : ProgressCallback | None
            Receives (current_block, total_block, message) updates.

        Raises
        ------
        FetchError
            If the chain head lookup or any chunk fetch fails; no partial
            state is produced.
        """
        report = on_progress or _no_progress
        stats = BuildStats()

        # 1) Resolve the target range once
        report(0, 0, "Fetching latest block...")
        try:
            start, end = await resolve_block_range(self._logs_provider, plan.start_block, plan.end_block)
        except ValueError:
            raise
        except Exception as e:
            first = plan.start_block if isinstance(plan.start_block, int) else 0
            raise FetchError(first, first, f"chain head lookup failed: {type(e).__name__}: {e}") from e
        logger.info("targeting blocks %d-%d", start, end)
        report(start, end, "Starting fetch...")

        # 2) Fetch
        raw = await self.fetch_all(
            plan=plan,
            start=start,
            end=end,
            stats=stats,
            manifest_repo=manifest_repo,
            on_progress=report,
        )

        # 3) Decode
        report(end, end, "Decoding events...")
        registry = self._registry_provider.get_registry()
        events, decode_report = decode_logs(raw, registry)
        stats.decoded = decode_report.decoded
        stats.unknown = decode_report.unknown
        stats.decode_failed = decode_report.failed
        logger.info("decoded %d relevant events", stats.decoded)

        # 4) Sequence
        report(end, end, "Sorting events...")
        events = sequence_events(events)

        # 5) Reduce
        report(end, end, "Processing state...")
        total_events = len(events)
        state = reduce_events(
            events,
            on_progress=lambda n: report(end, end, f"Processing state... ({n}/{total_events} events)"),
        )
        stats.processed = state.processed
        stats.processing_errors = state.errors

        # 6) Filter
        entries = post_filter(state.entries)
        stats.entries_total = len(state.entries)
        stats.entries_kept = len(entries)
        logger.info(
            "filtered state contains %d entries, removed %d", stats.entries_kept, stats.entries_removed
        )
        report(end, end, "Done")

        return BuildStateResult(entries=entries, events=events, stats=stats, latest_block=end)
