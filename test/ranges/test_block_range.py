from typing import List
import pytest
from hypothesis import given

from ranges.strategies import block_range, block_ranges, blocks_of
from logcache.errors import InvalidArgument
from logcache.ranges.block_range import BlockRange, merge_ranges, subtract_ranges


def test_block_range_validation():
    assert BlockRange(5, 5).size == 1
    assert BlockRange(0, 9).size == 10
    with pytest.raises(InvalidArgument):
        BlockRange(6, 5)
    with pytest.raises(InvalidArgument):
        BlockRange(-1, 5)


@given(block_range())
def test_block_range_rows(r: BlockRange):
    assert BlockRange.from_row(r.to_row()) == r
    assert BlockRange.from_dict(r.to_dict()) == r


def test_subtract_ranges_examples():
    w = BlockRange(100, 200)
    assert subtract_ranges(w, []) == [w]
    assert subtract_ranges(w, [w]) == []
    assert subtract_ranges(w, [BlockRange(95, 99)]) == [w]
    assert subtract_ranges(w, [BlockRange(201, 300)]) == [w]
    assert subtract_ranges(w, [BlockRange(50, 300)]) == []
    assert subtract_ranges(w, [BlockRange(120, 150)]) == [
        BlockRange(100, 119),
        BlockRange(151, 200),
    ]
    assert subtract_ranges(w, [BlockRange(100, 150)]) == [BlockRange(151, 200)]
    assert subtract_ranges(w, [BlockRange(150, 200)]) == [BlockRange(100, 149)]
    assert subtract_ranges(w, [BlockRange(110, 120), BlockRange(130, 140)]) == [
        BlockRange(100, 109),
        BlockRange(121, 129),
        BlockRange(141, 200),
    ]


@given(want=block_range(), have=block_ranges())
def test_subtract_ranges_properties(want: BlockRange, have: List[BlockRange]):
    missing = subtract_ranges(want, have)
    wanted = blocks_of([want])
    covered = blocks_of(have)
    missing_blocks = blocks_of(missing)

    # missing and covered blocks reconstruct the wanted range
    assert missing_blocks | (covered & wanted) == wanted
    assert missing_blocks & covered == set()
    # pieces are pairwise disjoint
    assert sum(r.size for r in missing) == len(missing_blocks)


@given(want=block_range(), have=block_ranges())
def test_subtract_ranges_order_independent(want: BlockRange, have: List[BlockRange]):
    assert blocks_of(subtract_ranges(want, have)) == blocks_of(
        subtract_ranges(want, list(reversed(have)))
    )


def test_merge_ranges_examples():
    assert merge_ranges([]) == []
    assert merge_ranges([BlockRange(1, 5)]) == [BlockRange(1, 5)]
    assert merge_ranges([BlockRange(1, 5), BlockRange(6, 10)]) == [BlockRange(1, 10)]
    assert merge_ranges([BlockRange(1, 5), BlockRange(7, 10)]) == [
        BlockRange(1, 5),
        BlockRange(7, 10),
    ]
    assert merge_ranges([BlockRange(7, 10), BlockRange(1, 8), BlockRange(2, 3)]) == [
        BlockRange(1, 10)
    ]


def test_merge_ranges_leaves_input_untouched():
    ranges = [BlockRange(7, 10), BlockRange(1, 6)]
    merged = merge_ranges(ranges)
    assert merged == [BlockRange(1, 10)]
    assert ranges == [BlockRange(7, 10), BlockRange(1, 6)]


@given(block_ranges())
def test_merge_ranges_properties(ranges: List[BlockRange]):
    merged = merge_ranges(ranges)
    assert merge_ranges(merged) == merged
    assert blocks_of(merged) == blocks_of(ranges)
    for left, right in zip(merged, merged[1:]):
        assert right.from_block > left.to_block + 1
