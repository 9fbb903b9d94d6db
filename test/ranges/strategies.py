from typing import List
from hypothesis.strategies import SearchStrategy, composite, integers, lists
from logcache.ranges.block_range import BlockRange


@composite
def block_range(draw, min_block: int = 0, max_block: int = 500) -> BlockRange:
    a = draw(integers(min_block, max_block))
    b = draw(integers(min_block, max_block))
    return BlockRange(min(a, b), max(a, b))


def block_ranges(max_size: int = 10) -> SearchStrategy[List[BlockRange]]:
    return lists(block_range(), max_size=max_size)


def blocks_of(ranges: List[BlockRange]) -> set:
    out = set()
    for r in ranges:
        out.update(range(r.from_block, r.to_block + 1))
    return out
