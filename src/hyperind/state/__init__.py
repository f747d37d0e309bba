"""Namespace state: sequencing, reduction and the post-filter."""

from hyperind.state.reducer import (
    NameRecord,
    NamespaceState,
    is_resolved_name,
    post_filter,
    reduce_events,
    sequence_events,
)

__all__ = [
    "NameRecord",
    "NamespaceState",
    "is_resolved_name",
    "post_filter",
    "reduce_events",
    "sequence_events",
]
