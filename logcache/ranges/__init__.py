"""
Block ranges and the bookkeeping of already fetched ranges.

:func:`subtract_ranges` and :func:`merge_ranges` are pure functions
over lists of :class:`BlockRange`. :class:`FetchedRangesRepo` stores
which ranges were fully fetched for each filter.

Example:
    ::

        from logcache.ranges import BlockRange, merge_ranges, subtract_ranges

        have = merge_ranges([BlockRange(100, 150), BlockRange(151, 180)])
        # [BlockRange(100, 180)]
        subtract_ranges(BlockRange(50, 200), have)
        # [BlockRange(50, 99), BlockRange(181, 200)]
"""

from logcache.ranges.block_range import BlockRange, merge_ranges, subtract_ranges
from logcache.ranges.repo import FetchedRangesRepo
