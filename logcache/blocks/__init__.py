"""
Resolving block tags to block numbers.

Example:
    ::

        from logcache.blocks import BlocksService

        service = BlocksService.create()
        service.resolve_tag("latest")
        service.finalized_block_number()
"""

from logcache.blocks.service import BlocksService, BlockTag
