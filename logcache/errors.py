"""
Errors raised by :mod:`logcache`.

Every error propagates to the caller of the top-level operation that
triggered it. Nothing is retried and nothing is downgraded to a warning.
"""


class LogCacheError(Exception):
    """
    Base class for all :mod:`logcache` errors.
    """


class InvalidArgument(LogCacheError, ValueError):
    """
    Invalid page size, malformed topic or address, or an inverted block range.
    """


class UnresolvableBlock(LogCacheError):
    """
    A block tag couldn't be resolved to a block number.
    """


class FinalityViolation(LogCacheError):
    """
    An attempt to cache blocks above the last finalized block.
    """


class StoreFailure(LogCacheError):
    """
    A cache database statement or transaction failed.
    """


class UpstreamFetchFailure(LogCacheError):
    """
    An RPC page fetch failed.
    """
