from __future__ import annotations
from typing import Any, Dict, List, Tuple
import json

from web3.datastructures import AttributeDict

from logcache.utils import json_response


class Log:
    """
    Log represents an event log on Ethereum blockchain.

    Only ``block_number`` and ``log_index`` are interpreted,
    the rest of the entry returned by ``eth_getLogs`` is kept as is in
    :attr:`payload` (with binary values in the ``0x...`` hex format).
    """

    #: The block this log appeared in
    block_number: int
    #: The log number inside the block
    log_index: int
    #: The full log entry as returned by RPC
    payload: Dict[str, Any]

    def __init__(self, block_number: int, log_index: int, payload: Dict[str, Any]):
        self.block_number = block_number
        self.log_index = log_index
        self.payload = payload

    @staticmethod
    def from_web3(entry: AttributeDict) -> Log:
        """
        Create :class:`Log` from a raw web3 log entry
        """
        return Log.from_dict(json.loads(json_response(entry)))

    @staticmethod
    def from_row(row: Tuple[int, int, str]) -> Log:
        """
        Deserialize from database row

        Args:
            row: database row (block_number, log_index, data)
        """
        block_number, log_index, data = row
        return Log(block_number, log_index, json.loads(data))

    def to_row(self, filter_id: str) -> Tuple[str, int, int, str]:
        """
        Serialize to database row

        Args:
            filter_id: the identity of the filter this log was fetched for

        Returns:
            database row
        """
        return (filter_id, self.block_number, self.log_index, json.dumps(self.payload))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert :class:`Log` to dict
        """
        return {**self.payload, "blockNumber": self.block_number, "logIndex": self.log_index}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> Log:
        """
        Create :class:`Log` from dict
        """
        return Log(block_number=d["blockNumber"], log_index=d["logIndex"], payload=d)

    @property
    def address(self) -> str | None:
        """
        The contract address that emitted this log
        """
        return self.payload.get("address")

    @property
    def topics(self) -> List[str]:
        """
        Indexed topics of this log
        """
        return self.payload.get("topics", [])

    @property
    def transaction_hash(self) -> str | None:
        """
        The hash of the transaction this log appeared in
        """
        return self.payload.get("transactionHash")

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __repr__(self):
        return f"Log({json.dumps(self.to_dict())})"
