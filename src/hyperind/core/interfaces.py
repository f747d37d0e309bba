from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, List, Protocol, runtime_checkable

from hyperind.core.models import ChunkRecord, EventLog

if TYPE_CHECKING:
    from hyperind.decoding.specs import EventRegistry


# (current_block, total_block, message)
ProgressCallback = Callable[[int, int, str], None]


# ---------------------------------------------------------------------------
# ILogSource
# ---------------------------------------------------------------------------

@runtime_checkable
class ILogSource(Protocol):
    """
    Abstract chunked source of EVM logs.

    Domain expectations:
    - It returns EventLog objects already mapped into internal domain models.
    - It hides the underlying RPC / DB / archive technology.
    - A failed call raises; the use case turns that into a FetchError.
    """

    async def get_logs(
        self,
        *,
        address: str,
        from_block: int,
        to_block: int,
        topic0s: Sequence[str] | None = None,
    ) -> List[EventLog]:
        """
        Return all logs emitted by `address` over the inclusive block range.

        Implementations:
        - RPC-based (`hyperind.clients.rpc.RPC`)
        - In-memory or synthetic source for testing
        """
        ...

    async def latest_block(self) -> int:
        """
        Return the current chain head height.

        Resolved once per run; the fetch loop never chases the head.
        """
        ...


# ---------------------------------------------------------------------------
# IManifestRepository
# ---------------------------------------------------------------------------

@runtime_checkable
class IManifestRepository(Protocol):
    """
    Append-only journal of chunk fetch status (started/done/failed).
    """

    async def append(self, record: ChunkRecord) -> None:
        ...


# ---------------------------------------------------------------------------
# IEventRegistryProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventRegistryProvider(Protocol):
    """
    Abstract provider of the EventRegistry used for decoding.

    How the registry is built (ABI JSON, signatures, ...) is an
    infrastructure concern.
    """

    def get_registry(self) -> EventRegistry:
        ...
