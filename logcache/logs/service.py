from __future__ import annotations
import logging
from typing import Callable, List

from logcache.blocks.service import BlocksService, BlockTag
from logcache.core import Core
from logcache.errors import FinalityViolation, InvalidArgument
from logcache.filters.log_filter import LogFilter
from logcache.logs.fetcher import FetchLogsBatchCallback, LogsFetcher
from logcache.logs.log import Log
from logcache.logs.repo import LogsRepo
from logcache.ranges.block_range import BlockRange
from logcache.ranges.repo import FetchedRangesRepo

logger = logging.getLogger(__name__)

#: Called after every page fetched into cache with
#: ``(all_logs, batch_logs, batch_from_block, batch_to_block,
#: missing_ranges, range_index, total_scanned_blocks, blocks_to_scan)``
FetchLogsToCacheBatchCallback = Callable[
    [List[Log], List[Log], int, int, List[BlockRange], int, int, int], None
]


class LogsService(Core):
    """
    Service for fetching logs.

    This service fetches logs from web3, caches them,
    and reads from the cache on subsequent calls.

    Only finalized blocks are cached. Logs of unfinalized
    blocks might still be reorganized, so they are always fetched from web3.

    It supports quick incremental fetches. For example,
    if you fetched Transfer logs from block 10_000 to
    block 20_000, then a subsequent request from block 15_000 to
    block 21_000 will return 15_000 - 20_000 from cache and fetch
    only 20_001 - 21_000 from web3.

    **Request/Response flow**

    ::

                   +-------------+         +-------+ +-------------------+ +----------+
                   | LogsService |         | Web3  | | FetchedRangesRepo | | LogsRepo |
                   +-------------+         +-------+ +-------------------+ +----------+
        ---------------  |                     |               |                |
        | Request logs |-|                     |               |                |
        |--------------| |                     |               |                |
                         | Finalized block     |               |                |
                         |-------------------->|               |                |
                         |                     |               |                |
                         | Merge and diff ranges               |                |
                         |------------------------------------>|                |
                         |                     |               |                |
                         | Fetch missing pages |               |                |
                         |-------------------->|               |                |
                         |                     |               |                |
                         | Store page logs and page range (one transaction)     |
                         |----------------------------------------------------->|
                         |                     |               |                |
                         | Read finalized logs |               |                |
                         |----------------------------------------------------->|
                         |                     |               |                |
                         | Fetch unfinalized   |               |                |
                         |-------------------->|               |                |
          -------------  |                     |               |                |
          | Response   |-|                     |               |                |
          |------------| |                     |               |                |

    Note:
        Each page is stored in its own transaction. If a fetch fails midway,
        pages stored before the failure stay in the cache, and the next call
        fetches only what is still missing.

        A single writer per filter is assumed. Two processes fetching the
        same filter at the same time may lose each other's range bookkeeping
        (but never the logs themselves).

    Args:
        logs_repo: Repo of logs
        ranges_repo: Repo of fetched ranges
        blocks_service: Service for resolving block tags
        logs_fetcher: Paged logs fetcher
        kwargs: Args for the :class:`logcache.core.Core`
    """

    _logs_repo: LogsRepo
    _ranges_repo: FetchedRangesRepo
    _blocks_service: BlocksService
    _logs_fetcher: LogsFetcher

    def __init__(
        self,
        logs_repo: LogsRepo,
        ranges_repo: FetchedRangesRepo,
        blocks_service: BlocksService,
        logs_fetcher: LogsFetcher,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._logs_repo = logs_repo
        self._ranges_repo = ranges_repo
        self._blocks_service = blocks_service
        self._logs_fetcher = logs_fetcher

    @staticmethod
    def create(**kwargs) -> LogsService:
        """
        Create an instance of :class:`LogsService`

        Args:
            kwargs: Args for the :class:`logcache.core.Core`

        Returns:
            An instance of :class:`LogsService`
        """
        logs_repo = LogsRepo(**kwargs)
        ranges_repo = FetchedRangesRepo(**kwargs)
        blocks_service = BlocksService(**kwargs)
        logs_fetcher = LogsFetcher(**kwargs)
        return LogsService(
            logs_repo, ranges_repo, blocks_service, logs_fetcher, **kwargs
        )

    def get_logs(
        self,
        log_filter: LogFilter,
        from_block: BlockTag = "earliest",
        to_block: BlockTag = "latest",
        page_size: int | None = None,
        finalized_callback: FetchLogsToCacheBatchCallback | None = None,
        unfinalized_callback: FetchLogsBatchCallback | None = None,
    ) -> List[Log]:
        """
        Get logs specified by parameters.

        Logs of finalized blocks are served from cache (missing blocks are
        fetched into cache first). Logs of unfinalized blocks are fetched from
        web3 and never cached.

        Args:
            log_filter: Address and topics
            from_block: fetch logs from this block (inclusive)
            to_block: fetch logs up to this block (inclusive)
            page_size: Maximum number of blocks per ``eth_getLogs`` request
            finalized_callback: Progress of fetching finalized blocks into cache
            unfinalized_callback: Progress of fetching unfinalized blocks

        Returns:
            Logs ordered by block number and log index

        Raises:
            InvalidArgument: if the block range is inverted or ``page_size`` < 1
            UnresolvableBlock: if a block tag can't be resolved
            UpstreamFetchFailure: if fetching a page fails
            StoreFailure: if the cache database fails
        """
        page_size = self._page_size_or_default(page_size)
        last_finalized = self._blocks_service.finalized_block_number()
        block_range = self._resolve_range(from_block, to_block)

        logs: List[Log] = []
        if block_range.from_block <= last_finalized:
            finalized_range = BlockRange(
                block_range.from_block, min(block_range.to_block, last_finalized)
            )
            self._fetch_range_to_cache(
                log_filter, finalized_range, page_size, finalized_callback
            )
            logs = self._read_range_from_cache(log_filter, finalized_range)

        if block_range.to_block > last_finalized:
            unfinalized_range = BlockRange(
                max(block_range.from_block, last_finalized + 1), block_range.to_block
            )
            logger.info(
                "Fetching unfinalized blocks %d - %d without caching",
                unfinalized_range.from_block,
                unfinalized_range.to_block,
            )
            logs.extend(
                self._logs_fetcher.fetch_logs(
                    log_filter, unfinalized_range, page_size, unfinalized_callback
                )
            )

        return logs

    def fetch_logs_to_cache(
        self,
        log_filter: LogFilter,
        from_block: BlockTag = "earliest",
        to_block: BlockTag = "finalized",
        page_size: int | None = None,
        batch_callback: FetchLogsToCacheBatchCallback | None = None,
    ):
        """
        Fetch logs specified by parameters and save them to cache.
        Only blocks that are not cached yet are fetched.

        Args:
            log_filter: Address and topics
            from_block: fetch logs from this block (inclusive)
            to_block: fetch logs up to this block (inclusive), must be finalized
            page_size: Maximum number of blocks per ``eth_getLogs`` request
            batch_callback: Called after every page is stored

        Raises:
            FinalityViolation: if ``to_block`` is above the last finalized block
            InvalidArgument: if the block range is inverted or ``page_size`` < 1
            UnresolvableBlock: if a block tag can't be resolved
            UpstreamFetchFailure: if fetching a page fails
            StoreFailure: if the cache database fails
        """
        page_size = self._page_size_or_default(page_size)
        block_range = self._resolve_range(from_block, to_block)
        last_finalized = self._blocks_service.finalized_block_number()
        if block_range.to_block > last_finalized:
            raise FinalityViolation(
                f"Block {block_range.to_block} is not finalized "
                f"(last finalized block is {last_finalized})"
            )
        self._fetch_range_to_cache(log_filter, block_range, page_size, batch_callback)

    def read_logs_from_cache(
        self,
        log_filter: LogFilter,
        from_block: BlockTag = "earliest",
        to_block: BlockTag = "latest",
    ) -> List[Log]:
        """
        Read logs specified by parameters from cache.

        Warning:
            The cache is not checked for completeness. Blocks that were never
            fetched with :meth:`fetch_logs_to_cache` (or :meth:`get_logs`)
            silently contribute no logs. Fetch the same or a wider range first.

        Args:
            log_filter: Address and topics
            from_block: read logs from this block (inclusive)
            to_block: read logs up to this block (inclusive)

        Returns:
            Cached logs ordered by block number and log index
        """
        block_range = self._resolve_range(from_block, to_block)
        return self._read_range_from_cache(log_filter, block_range)

    def _fetch_range_to_cache(
        self,
        log_filter: LogFilter,
        block_range: BlockRange,
        page_size: int,
        batch_callback: FetchLogsToCacheBatchCallback | None,
    ):
        filter_id = log_filter.filter_id(self.chain_id)
        self._ranges_repo.tidy(filter_id)
        with self._ranges_repo.transaction():
            missing_ranges = self._ranges_repo.missing_ranges(filter_id, block_range)

        blocks_to_scan = sum(r.size for r in missing_ranges)
        if len(missing_ranges) == 0:
            logger.debug(
                "Blocks %d - %d are already cached for filter %s",
                block_range.from_block,
                block_range.to_block,
                filter_id,
            )
            return
        logger.info(
            "Fetching %d missing ranges (%d blocks) for filter %s",
            len(missing_ranges),
            blocks_to_scan,
            filter_id,
        )

        total_scanned_blocks = 0
        for range_index, missing_range in enumerate(missing_ranges):

            def save_batch(
                logs: List[Log], batch_logs: List[Log], batch_from: int, batch_to: int
            ):
                nonlocal total_scanned_blocks
                with self._ranges_repo.transaction():
                    self._logs_repo.save(filter_id, batch_logs)
                    self._ranges_repo.insert_range(
                        filter_id, BlockRange(batch_from, batch_to)
                    )
                total_scanned_blocks += batch_to - batch_from + 1
                if not batch_callback is None:
                    batch_callback(
                        logs,
                        batch_logs,
                        batch_from,
                        batch_to,
                        missing_ranges,
                        range_index,
                        total_scanned_blocks,
                        blocks_to_scan,
                    )

            self._logs_fetcher.fetch_logs(
                log_filter, missing_range, page_size, save_batch
            )

        self._ranges_repo.tidy(filter_id)

    def _read_range_from_cache(
        self, log_filter: LogFilter, block_range: BlockRange
    ) -> List[Log]:
        filter_id = log_filter.filter_id(self.chain_id)
        with self._logs_repo.transaction():
            return list(
                self._logs_repo.find(
                    filter_id, block_range.from_block, block_range.to_block
                )
            )

    def _resolve_range(self, from_block: BlockTag, to_block: BlockTag) -> BlockRange:
        return BlockRange(
            self._blocks_service.resolve_tag(from_block),
            self._blocks_service.resolve_tag(to_block),
        )

    def _page_size_or_default(self, page_size: int | None) -> int:
        if page_size is None:
            page_size = self.page_size
        if page_size < 1:
            raise InvalidArgument(f"Invalid page size {page_size}")
        return page_size
