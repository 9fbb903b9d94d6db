from __future__ import annotations

from requests.exceptions import RequestException
from web3.exceptions import BlockNotFound, Web3Exception

from logcache.core import Core
from logcache.errors import InvalidArgument, UnresolvableBlock

#: A block number or a symbolic tag like ``"latest"`` or ``"finalized"``
BlockTag = int | str


class BlocksService(Core):
    """
    Service for resolving block tags to block numbers.

    Block numbers are passed through. Numeric strings (decimal or ``0x`` hex)
    are parsed. Everything else is treated as a symbolic tag
    (``earliest``, ``latest``, ``safe``, ``finalized``, ``pending``)
    and resolved with ``eth_getBlockByNumber``.

    Args:
        kwargs: Args for the :class:`logcache.core.Core`
    """

    @staticmethod
    def create(**kwargs) -> BlocksService:
        """
        Create an instance of :class:`BlocksService`

        Args:
            kwargs: Args for the :class:`logcache.core.Core`

        Returns:
            An instance of :class:`BlocksService`
        """
        return BlocksService(**kwargs)

    def resolve_tag(self, tag: BlockTag) -> int:
        """
        Resolve block tag to block number.

        Args:
            tag: block number or block tag

        Returns:
            Block number

        Raises:
            InvalidArgument: if the block number is negative
            UnresolvableBlock: if the tag can't be resolved
        """
        if isinstance(tag, str):
            number = _parse_block_number(tag)
            if number is None:
                return self._fetch_block_number_from_rpc(tag)
            tag = number
        if tag < 0:
            raise InvalidArgument(f"Negative block number {tag}")
        return tag

    def finalized_block_number(self) -> int:
        """
        The number of the last finalized block.

        Raises:
            UnresolvableBlock: if the RPC doesn't know the finalized block
                or can't be reached
        """
        return self._fetch_block_number_from_rpc("finalized")

    def _fetch_block_number_from_rpc(self, tag: str) -> int:
        try:
            block = self.w3.eth.get_block(tag)
        except (BlockNotFound, Web3Exception, ValueError, RequestException) as e:
            raise UnresolvableBlock(f"Block {tag} is not found") from e
        number = block.get("number") if block is not None else None
        if number is None:
            raise UnresolvableBlock(f"Block {tag} has no number")
        return number


def _parse_block_number(tag: str) -> int | None:
    try:
        if tag.startswith(("0x", "0X")):
            return int(tag, 16)
        return int(tag)
    except ValueError:
        return None
