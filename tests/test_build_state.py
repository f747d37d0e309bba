from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from hyperind.constants import ROOT_HASH
from hyperind.core.errors import FetchError
from hyperind.core.models import ChunkRecord, EventLog
from hyperind.core.use_cases.build_state import BuildStatePlan, BuildStateService
from hyperind.decoding.registry import EventRegistryProvider
from hyperind.orchestration.utils import iter_chunks, resolve_block_range

from conftest import LogFactory, addr, h32

ALICE = h32(0xA11CE)


def _plan(start: int | str = 0, end: int | str = 99, step: int = 50) -> BuildStatePlan:
    return BuildStatePlan(address="0xhypermap", start_block=start, end_block=end, step=step, delay_s=0)


def _alice_logs(logs: LogFactory) -> list[EventLog]:
    return [
        logs.mint(ROOT_HASH, ALICE, "alice", block=10, log_index=0),
        logs.transfer(addr(0), addr(0xB0B), 0xA11CE, block=10, log_index=1),
        logs.note(ALICE, h32(0x1), "~ip", bytes([1, 2, 3, 4]), block=12, log_index=0),
    ]


class _Recorder:
    def __init__(self) -> None:
        self.records: list[ChunkRecord] = []

    async def append(self, rec: ChunkRecord) -> None:
        self.records.append(rec)


def test_iter_chunks_inclusive() -> None:
    assert list(iter_chunks(0, 99, 50)) == [(0, 49), (50, 99)]
    assert list(iter_chunks(0, 100, 50)) == [(0, 49), (50, 99), (100, 100)]
    assert list(iter_chunks(5, 5, 10)) == [(5, 5)]


def test_iter_chunks_rejects_bad_step() -> None:
    with pytest.raises(ValueError):
        list(iter_chunks(0, 10, 0))


@pytest.mark.asyncio
async def test_resolve_block_range_latest(mock_rpc: Any) -> None:
    assert await resolve_block_range(mock_rpc, "earliest", "latest") == (0, 100)
    mock_rpc.latest_block.assert_awaited_once()


@pytest.mark.asyncio
async def test_resolve_block_range_rejects_inverted(mock_rpc: Any) -> None:
    with pytest.raises(ValueError):
        await resolve_block_range(mock_rpc, 50, 10)


@pytest.mark.asyncio
async def test_run_rebuilds_named_entry(mock_rpc: Any, logs: LogFactory, registry) -> None:
    mock_rpc.get_logs.side_effect = [_alice_logs(logs), []]
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    result = await service.run(plan=_plan())

    alice = result.entries[ALICE]
    assert alice.full_name == "alice"
    assert alice.owner == addr(0xB0B)
    assert alice.creation_block == 10
    assert alice.notes["~ip"][0].value == "1.2.3.4"
    assert result.entries[ROOT_HASH].children == {ALICE}
    assert result.latest_block == 99
    assert result.stats.chunks_ok == 2
    assert result.stats.raw_logs == 3
    assert result.stats.decoded == 3
    assert result.stats.processing_errors == 0
    assert result.stats.entries_kept == 2


@pytest.mark.asyncio
async def test_run_fetches_sequential_chunks(mock_rpc: Any, registry) -> None:
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    await service.run(plan=_plan(start=0, end="latest", step=40))

    ranges = [(c.kwargs["from_block"], c.kwargs["to_block"]) for c in mock_rpc.get_logs.await_args_list]
    assert ranges == [(0, 39), (40, 79), (80, 100)]
    assert all(c.kwargs["address"] == "0xhypermap" for c in mock_rpc.get_logs.await_args_list)


@pytest.mark.asyncio
async def test_run_sleeps_after_each_chunk(mock_rpc: Any, registry) -> None:
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))
    plan = BuildStatePlan(address="0xhypermap", start_block=0, end_block=99, step=50, delay_s=1.5)

    with patch("hyperind.core.use_cases.build_state.asyncio.sleep", new=AsyncMock()) as sleep:
        await service.run(plan=plan)

    assert sleep.await_count == 2
    sleep.assert_awaited_with(1.5)


@pytest.mark.asyncio
async def test_fetch_failure_aborts_run(mock_rpc: Any, logs: LogFactory, registry) -> None:
    mock_rpc.get_logs.side_effect = [_alice_logs(logs), RuntimeError("RPC error: boom")]
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))
    manifest = _Recorder()

    with (
        patch("hyperind.core.use_cases.build_state.decode_logs") as decode,
        pytest.raises(FetchError) as excinfo,
    ):
        await service.run(plan=_plan(), manifest_repo=manifest)

    assert (excinfo.value.from_block, excinfo.value.to_block) == (50, 99)
    assert "boom" in str(excinfo.value)
    decode.assert_not_called()
    assert [(r.from_block, r.status) for r in manifest.records] == [
        (0, "started"),
        (0, "done"),
        (50, "started"),
        (50, "failed"),
    ]
    assert manifest.records[-1].error is not None


@pytest.mark.asyncio
async def test_unknown_signatures_produce_nothing(mock_rpc: Any, registry) -> None:
    stray = EventLog(
        address="0xhypermap", topics=("0x" + "12" * 32,), data_hex="0x", block_number=3, tx_hash="0xt", log_index=0
    )
    mock_rpc.get_logs.side_effect = [[stray], []]
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    result = await service.run(plan=_plan())

    assert list(result.entries) == [ROOT_HASH]
    assert result.events == []
    assert result.stats.unknown == 1


@pytest.mark.asyncio
async def test_unresolved_entries_are_filtered_out(mock_rpc: Any, logs: LogFactory, registry) -> None:
    orphan = logs.mint(h32(0xDEAD), h32(0xBEEF), "lost", block=5)
    mock_rpc.get_logs.side_effect = [[orphan], []]
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    result = await service.run(plan=_plan())

    assert h32(0xBEEF) not in result.entries
    assert result.stats.entries_total == 2
    assert result.stats.entries_removed == 1


@pytest.mark.asyncio
async def test_events_are_replayed_in_chain_order(mock_rpc: Any, logs: LogFactory, registry) -> None:
    # the node may hand back a chunk out of order
    mock_rpc.get_logs.side_effect = [list(reversed(_alice_logs(logs))), []]
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    result = await service.run(plan=_plan())

    assert [e.sort_key for e in result.events] == [(10, 0), (10, 1), (12, 0)]
    assert result.entries[ALICE].full_name == "alice"


@pytest.mark.asyncio
async def test_progress_messages(mock_rpc: Any, registry) -> None:
    seen: list[tuple[int, int, str]] = []
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    await service.run(plan=_plan(), on_progress=lambda c, t, m: seen.append((c, t, m)))

    messages = [m for _, _, m in seen]
    assert messages[0] == "Fetching latest block..."
    assert "Processing blocks 0 - 49" in messages
    assert "Processing blocks 50 - 99" in messages
    assert messages[-1] == "Done"
    assert messages.index("Decoding events...") < messages.index("Sorting events...") < messages.index(
        "Processing state..."
    )


@pytest.mark.asyncio
async def test_chain_head_failure_raises_fetch_error(mock_rpc: Any, registry) -> None:
    mock_rpc.latest_block.side_effect = httpx.ConnectError("refused")
    service = BuildStateService(mock_rpc, EventRegistryProvider(registry))

    with pytest.raises(FetchError) as excinfo:
        await service.run(plan=_plan(start=0, end="latest"))

    assert "chain head lookup failed" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    mock_rpc.get_logs.assert_not_called()
