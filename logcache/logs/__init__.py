# pylint: disable=line-too-long

"""
Module for fetching and caching logs from web3.

The main class of this module is :class:`LogsService`.
It is used for retrieving logs from web3 and storing them in
cache so that subsequent requests are returned from cache.

Logs are cached per filter (chain id, address and topics). Whatever the
requested block range is, only the blocks that were never fetched for
this filter are requested from web3. Blocks above the last finalized
block are always fetched from web3 and never cached.

Example:
    ::

        from logcache.filters import LogFilter, event_signature_to_topic
        from logcache.logs import LogsService

        dai_address = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
        transfer = event_signature_to_topic("Transfer(address,address,uint256)")

        service = LogsService.create()
        logs = service.get_logs(
            LogFilter(address=dai_address, topics=[transfer]),
            from_block=15830000,
            to_block="latest",
        )
"""

from logcache.logs.log import Log
from logcache.logs.repo import LogsRepo
from logcache.logs.fetcher import LogsFetcher, FetchLogsBatchCallback
from logcache.logs.service import LogsService, FetchLogsToCacheBatchCallback
