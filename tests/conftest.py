from typing import Any
from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from eth_utils import keccak

from hyperind.abi_events import make_hypermap_registry
from hyperind.constants import HYPERMAP_ADDRESS
from hyperind.core.models import DecodedEvent, EventLog
from hyperind.decoding.specs import EventRegistry


def h32(n: int) -> str:
    return "0x" + f"{n:064x}"


def addr(n: int) -> str:
    return "0x" + f"{n:040x}"


class LogFactory:
    """Builds ABI-encoded Hypermap logs the way the node returns them."""

    def __init__(self, registry: EventRegistry) -> None:
        self.topic0 = {spec.name: t0 for t0, spec in registry.items()}

    def raw(self, name: str, topics: list[str], data: bytes = b"", *, block: int = 1, log_index: int = 0) -> EventLog:
        return EventLog(
            address=HYPERMAP_ADDRESS.lower(),
            topics=(self.topic0[name], *topics),
            data_hex="0x" + data.hex(),
            block_number=block,
            tx_hash="0x" + f"{block:032x}{log_index:032x}",
            log_index=log_index,
        )

    def mint(self, parent: str, child: str, label: str, **kw: Any) -> EventLog:
        labelhash = "0x" + keccak(text=label).hex()
        return self.raw("Mint", [parent, child, labelhash], encode(["bytes"], [label.encode()]), **kw)

    def note(self, parent: str, notehash: str, label: str, data: bytes, **kw: Any) -> EventLog:
        labelhash = "0x" + keccak(text=label).hex()
        return self.raw("Note", [parent, notehash, labelhash], encode(["bytes", "bytes"], [label.encode(), data]), **kw)

    def fact(self, parent: str, facthash: str, label: str, data: bytes, **kw: Any) -> EventLog:
        labelhash = "0x" + keccak(text=label).hex()
        return self.raw("Fact", [parent, facthash, labelhash], encode(["bytes", "bytes"], [label.encode(), data]), **kw)

    def transfer(self, frm: str, to: str, token_id: int, **kw: Any) -> EventLog:
        return self.raw("Transfer", [_addr_topic(frm), _addr_topic(to), h32(token_id)], **kw)

    def gene(self, entry: str, gene: str, **kw: Any) -> EventLog:
        return self.raw("Gene", [entry, _addr_topic(gene)], **kw)


def _addr_topic(a: str) -> str:
    return "0x" + "0" * 24 + a[2:].lower()


def event(name: str, block: int, log_index: int = 0, **parameters: Any) -> DecodedEvent:
    return DecodedEvent(
        name=name,
        block_number=block,
        tx_hash="0x" + f"{block:032x}{log_index:032x}",
        log_index=log_index,
        parameters=parameters,
    )


def hexlify(text: str) -> str:
    return "0x" + text.encode().hex()


@pytest.fixture
def registry() -> EventRegistry:
    return make_hypermap_registry()


@pytest.fixture
def logs(registry: EventRegistry) -> LogFactory:
    return LogFactory(registry)


@pytest.fixture
def mock_rpc():
    rpc = AsyncMock()
    rpc.get_logs = AsyncMock(return_value=[])
    rpc.latest_block = AsyncMock(return_value=100)
    rpc.aclose = AsyncMock()
    return rpc
