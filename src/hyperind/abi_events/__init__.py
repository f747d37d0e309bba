import json
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Literal

from eth_utils import keccak
from pydantic import BaseModel

from hyperind.decoding.registry import add_event_spec
from hyperind.decoding.specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec


class AbiInput(BaseModel):
    indexed: bool
    internalType: str
    name: str
    type: str


class AbiEvent(BaseModel):
    anonymous: bool
    inputs: Sequence[AbiInput]
    name: str
    type: Literal["event"]


# Event section of the Hypermap proxy + implementation ABI.
# Approval / ApprovalForAll are deliberately left out: they carry no state.
HYPERMAP_ABI: list[dict[str, Any]] = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "parenthash", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes32", "name": "childhash", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes", "name": "labelhash", "type": "bytes"},
            {"indexed": False, "internalType": "bytes", "name": "label", "type": "bytes"},
        ],
        "name": "Mint",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "parenthash", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes32", "name": "facthash", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes", "name": "labelhash", "type": "bytes"},
            {"indexed": False, "internalType": "bytes", "name": "label", "type": "bytes"},
            {"indexed": False, "internalType": "bytes", "name": "data", "type": "bytes"},
        ],
        "name": "Fact",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "parenthash", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes32", "name": "notehash", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes", "name": "labelhash", "type": "bytes"},
            {"indexed": False, "internalType": "bytes", "name": "label", "type": "bytes"},
            {"indexed": False, "internalType": "bytes", "name": "data", "type": "bytes"},
        ],
        "name": "Note",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "entry", "type": "bytes32"},
            {"indexed": True, "internalType": "address", "name": "gene", "type": "address"},
        ],
        "name": "Gene",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "zeroTba", "type": "address"},
        ],
        "name": "Zero",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "from", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "to", "type": "address"},
            {"indexed": True, "internalType": "uint256", "name": "id", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "implementation", "type": "address"},
        ],
        "name": "Upgraded",
        "type": "event",
    },
]


def get_event_signature(event: AbiEvent) -> str:
    return f"{event.name}({','.join(event_input.type for event_input in event.inputs)})"


def get_event_topic0(event: AbiEvent) -> str:
    return "0x" + keccak(text=get_event_signature(event)).hex()


def get_event_topic_field_specs(event: AbiEvent) -> list[TopicFieldSpec]:
    return [
        TopicFieldSpec(event_input.name, event_input_idx + 1, event_input.type)
        for event_input_idx, event_input in enumerate(
            [event_input for event_input in event.inputs if event_input.indexed]
        )
    ]


def get_event_data_field_specs(event: AbiEvent) -> list[DataFieldSpec]:
    return [
        DataFieldSpec(event_input.name, event_input_idx, event_input.type)
        for event_input_idx, event_input in enumerate(
            [event_input for event_input in event.inputs if not event_input.indexed]
        )
    ]


def get_event_spec(event: AbiEvent) -> EventSpec:
    return EventSpec(
        topic0=get_event_topic0(event),
        name=event.name,
        signature=get_event_signature(event),
        topic_fields=get_event_topic_field_specs(event),
        data_fields=get_event_data_field_specs(event),
    )


AbiJson = Iterable[dict[str, Any]]
AbiSpec = AbiJson | Path


def _load_abi(abi: AbiSpec) -> AbiJson:
    if isinstance(abi, Path):
        return json.loads(abi.read_text())
    return abi


def get_events_from_abi(abi: AbiSpec) -> dict[str, AbiEvent]:
    abi = _load_abi(abi)
    return {entry["name"]: AbiEvent.model_validate(entry) for entry in abi if entry.get("type") == "event"}


def make_event_registry_from_events(events: Iterable[AbiEvent]) -> EventRegistry:
    reg: EventRegistry = {}

    for event in events:
        add_event_spec(
            reg,
            get_event_spec(event),
        )

    return reg


def make_event_registry_from_abi(abi: AbiSpec) -> EventRegistry:
    return make_event_registry_from_events(get_events_from_abi(abi).values())


def make_hypermap_registry() -> EventRegistry:
    """Return the registry for every state-bearing Hypermap event."""
    return make_event_registry_from_abi(HYPERMAP_ABI)
