"""
Logcache fetches Ethereum logs from web3 and
caches them for subsequent queries.

Logs of finalized blocks are fetched once per filter and then served from
an sqlite3 database. Logs of unfinalized blocks are always fetched from web3.

+--------------------------------------------------+------------------------------------+
| Class                                            | Description                        |
+==================================================+====================================+
| :class:`logcache.logs.LogsService`               | Fetching and caching logs          |
+--------------------------------------------------+------------------------------------+
| :class:`logcache.logs.LogsFetcher`               | Paged logs fetching (no cache)     |
+--------------------------------------------------+------------------------------------+
| :class:`logcache.ranges.FetchedRangesRepo`       | Block ranges already in cache      |
+--------------------------------------------------+------------------------------------+
| :class:`logcache.filters.LogFilter`              | Address / topics filter and its id |
+--------------------------------------------------+------------------------------------+
| :class:`logcache.blocks.BlocksService`           | Resolving block tags               |
+--------------------------------------------------+------------------------------------+

The best way to get started is to explore :class:`logcache.logs.LogsService`
and the ``logcache`` command line tool.
"""

from logcache.errors import (
    LogCacheError,
    InvalidArgument,
    UnresolvableBlock,
    FinalityViolation,
    StoreFailure,
    UpstreamFetchFailure,
)
from logcache.filters import LogFilter, event_signature_to_topic
from logcache.logs import Log, LogsService
from logcache.ranges import BlockRange
