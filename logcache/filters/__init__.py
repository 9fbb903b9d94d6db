"""
Log filters and their identities.

A :class:`LogFilter` is an ``(address, topics)`` pair. Its
:meth:`LogFilter.filter_id` on a given chain is the key for all
cached logs and fetched ranges, regardless of the requested block range.

Example:
    ::

        from logcache.filters import LogFilter, event_signature_to_topic

        dai = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
        transfer = event_signature_to_topic("Transfer(address,address,uint256)")
        log_filter = LogFilter(address=dai, topics=[transfer])
        log_filter.filter_id(1)
"""

from logcache.filters.log_filter import LogFilter, event_signature_to_topic
