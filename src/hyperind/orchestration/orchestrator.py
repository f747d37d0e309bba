"""Build-state orchestrator: fetch → decode → reduce → write.

This module provides two layers:

1) `run_build_state(...)`:
   - Pure application-layer use case.
   - Depends ONLY on interfaces (ILogSource, IEventRegistryProvider,
     IManifestRepository).
   - Does NOT instantiate RPC, LiveManifest, etc.

2) `build_state(...)` (convenience wrapper):
   - Wires concrete implementations (RPC, LiveManifest) from a
     `BuildStateConfig` for typical CLI / script usage.
   - Writes the state snapshot (and optionally the decoded events).
   - Owns the RPC client lifecycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from hyperind.abi_events import make_hypermap_registry
from hyperind.clients.rpc import RPC
from hyperind.core.config import BuildStateConfig
from hyperind.core.interfaces import (
    IEventRegistryProvider,
    ILogSource,
    IManifestRepository,
    ProgressCallback,
)
from hyperind.core.use_cases.build_state import BuildStatePlan, BuildStateResult, BuildStateService
from hyperind.decoding.registry import EventRegistryProvider
from hyperind.decoding.specs import EventRegistry
from hyperind.storage.events import write_events_parquet
from hyperind.storage.manifest import LiveManifest
from hyperind.storage.state_file import write_state_file

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class BuildStateOutput:
    """High-level output of the orchestrator."""

    result: BuildStateResult
    state_path: Path
    events_path: Path | None = None


# ---------------------------------------------------------------------------
# 1) Pure application use case (no concrete instantiation)
# ---------------------------------------------------------------------------


async def run_build_state(
    *,
    config: BuildStateConfig,
    logs_provider: ILogSource,
    registry_provider: IEventRegistryProvider,
    manifest_repo: IManifestRepository | None = None,
    on_progress: ProgressCallback | None = None,
) -> BuildStateResult:
    """Run the pipeline against injected providers."""
    plan = BuildStatePlan(
        address=config.address,
        start_block=config.start_block,
        end_block=config.end_block,
        step=config.step,
        delay_s=config.delay_s,
    )
    service = BuildStateService(
        logs_provider=logs_provider,
        registry_provider=registry_provider,
    )
    return await service.run(plan=plan, manifest_repo=manifest_repo, on_progress=on_progress)


# ---------------------------------------------------------------------------
# 2) Convenience wrapper
# ---------------------------------------------------------------------------


async def build_state(
    *,
    config: BuildStateConfig,
    registry: EventRegistry | None = None,
    on_progress: ProgressCallback | None = None,
) -> BuildStateOutput:
    """Fetch, rebuild and save the namespace state described by `config`."""
    registry_provider = EventRegistryProvider(registry if registry is not None else make_hypermap_registry())
    manifest_repo = LiveManifest(config.manifest_path) if config.manifest_path else None
    rpc = RPC(config.rpc_url, timeout_s=config.timeout_s)

    try:
        result = await run_build_state(
            config=config,
            logs_provider=rpc,
            registry_provider=registry_provider,
            manifest_repo=manifest_repo,
            on_progress=on_progress,
        )
    finally:
        await rpc.aclose()

    state_path = write_state_file(result.entries, config.out_dir, result.latest_block)
    logger.info("wrote namespace state to %s", state_path)

    events_path: Path | None = None
    if config.events_out is not None:
        rows = write_events_parquet(result.events, config.events_out)
        events_path = config.events_out
        logger.info("wrote %d decoded events to %s", rows, events_path)

    return BuildStateOutput(result=result, state_path=state_path, events_path=events_path)
