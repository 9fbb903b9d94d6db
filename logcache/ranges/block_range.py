from __future__ import annotations
import json
from typing import Any, Dict, List, Tuple

from logcache.errors import InvalidArgument


class BlockRange:
    """
    Closed block interval ``[from_block, to_block]``.

    Args:
        from_block: First block of the range (inclusive)
        to_block: Last block of the range (inclusive)

    Raises:
        InvalidArgument: if ``from_block`` is negative or greater than ``to_block``
    """

    #: First block of the range (inclusive)
    from_block: int
    #: Last block of the range (inclusive)
    to_block: int

    def __init__(self, from_block: int, to_block: int):
        if from_block < 0:
            raise InvalidArgument(f"Negative block number {from_block}")
        if from_block > to_block:
            raise InvalidArgument(
                f"Invalid block range: from_block {from_block} > to_block {to_block}"
            )
        self.from_block = from_block
        self.to_block = to_block

    @property
    def size(self) -> int:
        """
        Number of blocks in the range
        """
        return self.to_block - self.from_block + 1

    @staticmethod
    def from_row(row: Tuple[int, int]) -> BlockRange:
        """
        Deserialize from database row

        Args:
            row: database row
        """
        return BlockRange(*row)

    def to_row(self) -> Tuple[int, int]:
        """
        Serialize to database row

        Returns:
            database row
        """
        return (self.from_block, self.to_block)

    @staticmethod
    def from_dict(dct: Dict[str, Any]) -> BlockRange:
        """
        Create :class:`BlockRange` from dict
        """
        return BlockRange(from_block=dct["fromBlock"], to_block=dct["toBlock"])

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert :class:`BlockRange` to dict
        """
        return {"fromBlock": self.from_block, "toBlock": self.to_block}

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __hash__(self):
        return hash(self.to_row())

    def __repr__(self):
        return f"BlockRange({json.dumps(self.to_dict())})"


def subtract_ranges(want: BlockRange, have: List[BlockRange]) -> List[BlockRange]:
    """
    Blocks of ``want`` that are not covered by any of ``have``.

    Every range in ``have`` cuts each remaining piece of ``want`` into
    zero, one or two pieces. The order of ``have`` doesn't change the
    resulting set of blocks, only the order of the returned ranges.

    Args:
        want: The desired range
        have: Ranges that are already covered

    Returns:
        Missing ranges. An empty list if ``want`` is fully covered.

    Examples:
        ::

            subtract_ranges(BlockRange(0, 100), [BlockRange(10, 20), BlockRange(50, 200)])
            # [BlockRange(0, 9), BlockRange(21, 49)]
    """
    remaining = [want]
    for x in have:
        pieces = []
        for z in remaining:
            if x.to_block < z.from_block or x.from_block > z.to_block:
                pieces.append(z)
                continue
            if x.from_block > z.from_block:
                pieces.append(BlockRange(z.from_block, x.from_block - 1))
            if x.to_block < z.to_block:
                pieces.append(BlockRange(x.to_block + 1, z.to_block))
        remaining = pieces
    return remaining


def merge_ranges(ranges: List[BlockRange]) -> List[BlockRange]:
    """
    Merge overlapping and adjacent ranges.

    Adjacent ranges (``[1, 5]`` and ``[6, 10]``) are merged as well, since
    page-by-page fetches produce exactly such ranges.
    The input list is left untouched.

    Args:
        ranges: Ranges to merge, in any order

    Returns:
        Sorted, disjoint and non-adjacent ranges covering the same blocks
    """
    if len(ranges) <= 1:
        return list(ranges)

    sorted_ranges = sorted(ranges, key=lambda r: r.from_block)
    merged = []
    current = BlockRange(sorted_ranges[0].from_block, sorted_ranges[0].to_block)
    for nxt in sorted_ranges[1:]:
        if nxt.from_block <= current.to_block + 1:
            current = BlockRange(
                current.from_block, max(current.to_block, nxt.to_block)
            )
        else:
            merged.append(current)
            current = BlockRange(nxt.from_block, nxt.to_block)
    merged.append(current)
    return merged
