import logging
from typing import List

from logcache.core import Core
from logcache.ranges.block_range import BlockRange, merge_ranges, subtract_ranges

logger = logging.getLogger(__name__)


class FetchedRangesRepo(Core):
    """
    Reading and writing fetched :class:`BlockRange` to database.

    A fetched range of a filter states that every log of this filter
    inside the range is stored in the ``logs`` table.
    Ranges of one filter may overlap or touch each other until
    :meth:`tidy` merges them.
    """

    def insert_range(self, filter_id: str, block_range: BlockRange):
        """
        Save a fetched range. The range is not merged with existing ones.

        Args:
            filter_id: Filter identity
            block_range: Fetched range
        """
        self.conn.execute(
            "INSERT INTO fetched_ranges VALUES(?,?,?)",
            (filter_id, *block_range.to_row()),
        )

    def find(self, filter_id: str) -> List[BlockRange]:
        """
        All fetched ranges of a filter.

        Args:
            filter_id: Filter identity

        Returns:
            Ranges sorted by ``from_block``
        """
        rows = self.conn.execute(
            "SELECT from_block, to_block FROM fetched_ranges WHERE filter_id = ? "
            "ORDER BY from_block",
            (filter_id,),
        ).fetchall()
        return [BlockRange.from_row(r) for r in rows]

    def replace(self, filter_id: str, ranges: List[BlockRange]):
        """
        Delete all ranges of a filter and insert ``ranges`` instead.

        Must run inside a single :meth:`transaction`, so that the
        filter is never seen without its ranges.

        Args:
            filter_id: Filter identity
            ranges: New ranges
        """
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM fetched_ranges WHERE filter_id = ?", (filter_id,))
        cursor.executemany(
            "INSERT INTO fetched_ranges VALUES(?,?,?)",
            [(filter_id, *r.to_row()) for r in ranges],
        )

    def missing_ranges(self, filter_id: str, want: BlockRange) -> List[BlockRange]:
        """
        Parts of ``want`` that are not fetched yet.

        Args:
            filter_id: Filter identity
            want: The desired range

        Returns:
            Missing ranges
        """
        return subtract_ranges(want, self.find(filter_id))

    def tidy(self, filter_id: str):
        """
        Merge overlapping and adjacent ranges of a filter.
        Reading and rewriting happen in one transaction.

        Args:
            filter_id: Filter identity
        """
        with self.transaction():
            ranges = self.find(filter_id)
            if len(ranges) == 0:
                return
            merged = merge_ranges(ranges)
            if len(merged) == len(ranges):
                return
            logger.debug(
                "Merging %d fetched ranges into %d for filter %s",
                len(ranges),
                len(merged),
                filter_id,
            )
            self.replace(filter_id, merged)
