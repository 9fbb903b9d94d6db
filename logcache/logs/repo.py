from typing import Iterator, List
from logcache.logs.log import Log
from logcache.core import Core


class LogsRepo(Core):
    """
    Reading and writing :class:`Log` to database.

    Logs are keyed by ``(filter_id, block_number, log_index)``.
    """

    def find(self, filter_id: str, from_block: int, to_block: int) -> Iterator[Log]:
        """
        Find all logs of a filter in the database.

        Warning:
            This method doesn't check that the block range was fully fetched.
            Blocks that were never fetched simply have no logs.

        Args:
            filter_id: Filter identity
            from_block: starting from this block (inclusive)
            to_block: ending with this block (inclusive)

        Returns:
            Iterator over found logs ordered by block number and log index
        """
        rows = self.conn.execute(
            "SELECT block_number, log_index, data FROM logs WHERE filter_id = ? "
            "AND block_number >= ? AND block_number <= ? "
            "ORDER BY block_number, log_index",
            (filter_id, from_block, to_block),
        ).fetchall()
        return (Log.from_row(r) for r in rows)

    def save(self, filter_id: str, logs: List[Log]):
        """
        Save a set of logs into the database. Logs that are
        already saved are skipped.

        Args:
            filter_id: Filter identity
            logs: List of logs to save
        """
        cursor = self.conn.cursor()
        rows = [l.to_row(filter_id) for l in logs]
        cursor.executemany(
            "INSERT INTO logs VALUES(?,?,?,?) ON CONFLICT DO NOTHING", rows
        )
