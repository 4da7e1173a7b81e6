"""Deterministic tiling of a block interval into fixed-size windows."""

from treasuryscan.domain.models.transfer import BlockRange


def tile(from_block: int, to_block: int, span: int) -> list[BlockRange]:
    """Split [from_block, to_block] into contiguous windows of `span` blocks.

    The last window is clamped to `to_block`. Raises ValueError on an empty
    or negative interval and on span < 1.
    """
    if span < 1:
        raise ValueError(f"span must be >= 1, got {span}")
    if from_block < 0:
        raise ValueError(f"from_block must be >= 0, got {from_block}")
    if from_block > to_block:
        raise ValueError(f"from_block {from_block} > to_block {to_block}")

    windows: list[BlockRange] = []
    start = from_block
    while start <= to_block:
        end = min(start + span - 1, to_block)
        windows.append(BlockRange(from_block=start, to_block=end))
        start = end + 1
    return windows
