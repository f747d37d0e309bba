import json
from pathlib import Path

from hyperind.abi_events import (
    HYPERMAP_ABI,
    get_event_topic0,
    get_events_from_abi,
    make_event_registry_from_abi,
    make_hypermap_registry,
)

TRANSFER_T0 = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
UPGRADED_T0 = "0xbc7cd75a20ee27fd9adebab32041f755214dbc6bffa90cc0225b39da2e5c2d3b"


def test_make_hypermap_registry():
    registry = make_hypermap_registry()
    events = get_events_from_abi(HYPERMAP_ABI)

    assert len(registry) == 7
    assert {spec.name for spec in registry.values()} == {
        "Mint", "Note", "Fact", "Transfer", "Gene", "Zero", "Upgraded",
    }
    assert set(registry.keys()) == {get_event_topic0(event) for event in events.values()}


def test_well_known_signature_hashes():
    registry = make_hypermap_registry()

    assert registry[TRANSFER_T0].signature == "Transfer(address,address,uint256)"
    assert registry[UPGRADED_T0].name == "Upgraded"


def test_field_layout_separates_topics_and_data():
    registry = make_hypermap_registry()
    note = next(spec for spec in registry.values() if spec.name == "Note")

    assert [(f.name, f.index, f.type) for f in note.topic_fields] == [
        ("parenthash", 1, "bytes32"),
        ("notehash", 2, "bytes32"),
        ("labelhash", 3, "bytes"),
    ]
    assert note.data_types == ["bytes", "bytes"]


def test_make_event_registry_from_abi_file_skips_non_events(tmp_path: Path):
    abi = [
        {"inputs": [], "name": "FailedCall", "type": "error"},
        {"stateMutability": "payable", "type": "fallback"},
        *HYPERMAP_ABI,
    ]
    path = tmp_path / "hypermap_abi.json"
    path.write_text(json.dumps(abi))

    registry = make_event_registry_from_abi(path)

    assert registry.keys() == make_hypermap_registry().keys()
