"""Registry helpers.

- `add_event_spec(registry, spec)` → insert one spec (lowercases key)
- `EventRegistryProvider` → static provider for the build-state use case
"""

from __future__ import annotations

from hyperind.core.interfaces import IEventRegistryProvider
from hyperind.decoding.specs import EventRegistry, EventSpec


def add_event_spec(registry: EventRegistry, spec: EventSpec) -> None:
    """Insert one spec into the registry keyed by lowercased topic0."""
    registry[spec.topic0.lower()] = spec


class EventRegistryProvider(IEventRegistryProvider):
    """
    Simple registry provider that always returns the same EventRegistry.

    This is used as the bridge between the decoding registry (ABI) and the
    build-state use case which only depends on the interface.
    """

    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry

    def get_registry(self) -> EventRegistry:
        return self._registry
