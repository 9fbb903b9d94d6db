from __future__ import annotations
import logging
from typing import Callable, List

from requests.exceptions import RequestException
from web3.exceptions import Web3Exception

from logcache.core import Core
from logcache.errors import InvalidArgument, UpstreamFetchFailure
from logcache.filters.log_filter import LogFilter
from logcache.logs.log import Log
from logcache.ranges.block_range import BlockRange

logger = logging.getLogger(__name__)

#: Called after every fetched page with
#: ``(all_logs, batch_logs, batch_from_block, batch_to_block)``
FetchLogsBatchCallback = Callable[[List[Log], List[Log], int, int], None]


class LogsFetcher(Core):
    """
    Fetches logs from web3 page by page. Nothing is cached here.

    Pages are fetched one after another, so there is at most one
    ``eth_getLogs`` request in flight. There are no retries: the first
    failed page aborts the whole fetch.

    Args:
        kwargs: Args for the :class:`logcache.core.Core`
    """

    @staticmethod
    def create(**kwargs) -> LogsFetcher:
        """
        Create an instance of :class:`LogsFetcher`

        Args:
            kwargs: Args for the :class:`logcache.core.Core`

        Returns:
            An instance of :class:`LogsFetcher`
        """
        return LogsFetcher(**kwargs)

    def fetch_logs(
        self,
        log_filter: LogFilter,
        block_range: BlockRange,
        page_size: int,
        batch_callback: FetchLogsBatchCallback | None = None,
    ) -> List[Log]:
        """
        Fetch logs for the block range in pages of at most ``page_size`` blocks.

        Args:
            log_filter: Address and topics to fetch
            block_range: Blocks to fetch
            page_size: Maximum number of blocks per ``eth_getLogs`` request
            batch_callback: Called after every page, before the next one is requested

        Returns:
            Fetched logs ordered by block number and log index

        Raises:
            InvalidArgument: if ``page_size`` is less than 1
            UpstreamFetchFailure: if a page request fails
        """
        if page_size < 1:
            raise InvalidArgument(f"Invalid page size {page_size}")

        logs: List[Log] = []
        from_block = block_range.from_block
        while from_block <= block_range.to_block:
            to_block = min(from_block + page_size - 1, block_range.to_block)
            batch_logs = self._fetch_page(log_filter, BlockRange(from_block, to_block))
            logs.extend(batch_logs)
            if not batch_callback is None:
                batch_callback(logs, batch_logs, from_block, to_block)
            from_block = to_block + 1
        return logs

    def _fetch_page(self, log_filter: LogFilter, block_range: BlockRange) -> List[Log]:
        logger.debug(
            "Fetching logs for blocks %d - %d", block_range.from_block, block_range.to_block
        )
        try:
            entries = self.w3.eth.get_logs(log_filter.to_params(block_range))
        except (Web3Exception, ValueError, RequestException) as e:
            raise UpstreamFetchFailure(
                f"Couldn't fetch logs for blocks {block_range.from_block} - "
                f"{block_range.to_block}: {e}"
            ) from e
        return [Log.from_web3(e) for e in entries]
