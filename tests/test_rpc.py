import json
from typing import Any

import httpx
import pytest

from hyperind.clients.rpc import RPC, event_log_from_rpc


def _rpc_with(handler) -> RPC:
    rpc = RPC("http://node.test")
    rpc.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return rpc


def test_event_log_from_rpc_normalizes() -> None:
    log = event_log_from_rpc(
        {
            "address": "0x000000000044C6B8Cb4d8f0F889a3E47664EAeda",
            "topics": ["0xABCD"],
            "data": "0x01",
            "blockNumber": "0x1a",
            "transactionHash": "0xFEED",
            "logIndex": "0x2",
        }
    )

    assert log.address == "0x000000000044c6b8cb4d8f0f889a3e47664eaeda"
    assert log.topics == ("0xabcd",)
    assert (log.block_number, log.log_index, log.tx_hash) == (26, 2, "0xfeed")


@pytest.mark.asyncio
async def test_get_logs_sends_filter() -> None:
    seen: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        item = {"address": "0xAB", "topics": [], "data": "0x", "blockNumber": "0x10", "transactionHash": "0x1", "logIndex": "0x0"}
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": [item]})

    rpc = _rpc_with(handler)
    out = await rpc.get_logs(address="0xAB", from_block=16, to_block=31, topic0s=["0xT0"])
    await rpc.aclose()

    assert [log.block_number for log in out] == [16]
    assert seen[0]["method"] == "eth_getLogs"
    assert seen[0]["params"][0] == {"address": "0xab", "fromBlock": "0x10", "toBlock": "0x1f", "topics": [["0xt0"]]}


@pytest.mark.asyncio
async def test_latest_block() -> None:
    rpc = _rpc_with(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x64"}))

    assert await rpc.latest_block() == 100
    await rpc.aclose()


@pytest.mark.asyncio
async def test_rpc_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32005, "message": "limit exceeded"}})

    rpc = _rpc_with(handler)
    with pytest.raises(RuntimeError, match="limit exceeded"):
        await rpc.get_logs(address="0xab", from_block=0, to_block=1)
    await rpc.aclose()


@pytest.mark.asyncio
async def test_http_error_raises() -> None:
    rpc = _rpc_with(lambda request: httpx.Response(503))

    with pytest.raises(httpx.HTTPStatusError):
        await rpc.latest_block()
    await rpc.aclose()
