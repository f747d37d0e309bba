"""Block-range utilities for the chunked fetch loop.

All intervals are inclusive on both ends: [start, end].
"""

from __future__ import annotations

from collections.abc import Generator

from hyperind.core.interfaces import ILogSource


def iter_chunks(a: int, b: int, step: int) -> Generator[tuple[int, int], None, None]:
    """Yield inclusive [start, end] block ranges of size at most `step`."""
    if step <= 0:
        raise ValueError("step must be positive")
    x = a
    while x <= b:
        y = min(b, x + step - 1)
        yield (x, y)
        x = y + 1


async def resolve_block_range(
    logs_provider: ILogSource,
    start_block: int | str,
    end_block: int | str,
) -> tuple[int, int]:
    """Resolve start and end blocks, handling special values like 'latest'.

    The chain head is queried at most once.
    """
    if isinstance(start_block, str) and start_block.lower() in ("earliest", "genesis"):
        start = 0
    else:
        start = int(start_block)

    if isinstance(end_block, str) and end_block.lower() == "latest":
        end = await logs_provider.latest_block()
    else:
        end = int(end_block)

    if start > end:
        raise ValueError(f"start_block {start} is past end_block {end}")

    return start, end
