"""Error taxonomy for the state-building pipeline.

Only `FetchError` terminates a run. Every other error is recovered where it
is raised: the offending log or event is dropped and the run continues.
"""

from __future__ import annotations


class HyperIndError(Exception):
    """Base class for all HyperInd errors."""


class FetchError(HyperIndError):
    """A chunk fetch from the log source failed."""

    def __init__(self, from_block: int, to_block: int, reason: str) -> None:
        super().__init__(f"failed to fetch logs for blocks {from_block}-{to_block}: {reason}")
        self.from_block = from_block
        self.to_block = to_block
        self.reason = reason


class DecodeError(HyperIndError):
    """A single raw log could not be ABI-decoded."""


class EventProcessingError(HyperIndError):
    """The reducer failed while applying one decoded event."""


class MalformedInputError(HyperIndError):
    """Input value (token id, hex payload) that cannot be interpreted."""
