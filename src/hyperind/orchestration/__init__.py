"""Orchestration helpers for the chunked fetch loop.

This package provides:
- Block-range utilities (iter_chunks, resolve_block_range)
- `orchestrator.build_state`: wires the RPC client, manifest and writers
  around the build-state use case (import it from the submodule)
"""

from hyperind.orchestration.utils import iter_chunks, resolve_block_range

__all__ = [
    "iter_chunks",
    "resolve_block_range",
]
