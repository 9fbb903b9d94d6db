from __future__ import annotations
import json
import re
from typing import Any, Dict, List, Sequence

from eth_utils import encode_hex, event_signature_to_log_topic, is_hex, keccak

from logcache.errors import InvalidArgument
from logcache.ranges.block_range import BlockRange

#: A topic position: exact match, any of several values, or wildcard
Topic = str | List[str] | None

#: Solidity type aliases and their canonical names used in event signatures
TYPE_ALIASES = {
    "uint": "uint256",
    "int": "int256",
    "fixed": "fixed128x18",
    "ufixed": "ufixed128x18",
    "byte": "bytes1",
}


class LogFilter:
    """
    The block-range independent part of an ``eth_getLogs`` query.

    Address and topics are canonicalized on assignment, so two filters
    selecting the same logs are equal and share the cached data:

        * the address is lowercased
        * topics are lowercased
        * a list of alternative topics (OR) is deduplicated and sorted,
          a single alternative is stored as a plain topic
        * trailing ``None`` (wildcard) topics are dropped

    Args:
        address: Contract address, ``None`` for any address
        topics: A list of topics. Each one is a hex string, a list (or set) of
                hex strings for OR queries, or ``None`` for any value.

    Raises:
        InvalidArgument: if the address or one of the topics is malformed
    """

    _address: str | None
    _topics: List[Topic]

    def __init__(
        self,
        address: str | None = None,
        topics: Sequence[str | Sequence[str] | None] | None = None,
    ):
        self.address = address
        self.topics = topics

    @property
    def address(self) -> str | None:
        """
        Contract address. The convention is it's always stored in lowercase.
        """
        return self._address

    @address.setter
    def address(self, val: str | None):
        if val is None:
            self._address = None
            return
        if not _is_prefixed_hex(val, 42):
            raise InvalidArgument(f"Invalid address: {val}")
        self._address = val.lower()

    @property
    def topics(self) -> List[Topic]:
        """
        Canonical topics
        """
        return self._topics

    @topics.setter
    def topics(self, val: Sequence[str | Sequence[str] | None] | None):
        self._topics = LogFilter.normalize_topics(val)

    @staticmethod
    def normalize_topics(
        topics: Sequence[str | Sequence[str] | None] | None,
    ) -> List[Topic]:
        """
        Canonicalize topics.

        Args:
            topics: Raw topics

        Returns:
            Canonical topics
        """
        if topics is None:
            return []
        if isinstance(topics, str):
            raise InvalidArgument(f"Topics must be a list, got string {topics}")
        out = []
        for topic in topics:
            if topic is None:
                out.append(None)
            elif isinstance(topic, str):
                out.append(_normalize_topic(topic))
            else:
                alternatives = sorted({_normalize_topic(t) for t in topic})
                out.append(alternatives[0] if len(alternatives) == 1 else alternatives)
        while len(out) > 0 and out[-1] is None:
            out.pop()
        return out

    def filter_id(self, chain_id: int) -> str:
        """
        Identity of the filter on a chain.

        It doesn't depend on the block range, and it's different for
        different chains, so that logs of one chain never leak into another.

        Args:
            chain_id: Ethereum chain_id

        Returns:
            keccak256 hash (``0x...``) of the canonical filter
        """
        serialized = json.dumps(
            [chain_id, self.address, self.topics], separators=(",", ":")
        )
        return encode_hex(keccak(text=serialized))

    def to_params(self, block_range: BlockRange) -> Dict[str, Any]:
        """
        ``eth_getLogs`` filter params for a block range.

        Args:
            block_range: The block range

        Returns:
            Filter params for :meth:`web3.eth.Eth.get_logs`
        """
        params: Dict[str, Any] = {
            "fromBlock": block_range.from_block,
            "toBlock": block_range.to_block,
        }
        if not self.address is None:
            params["address"] = self.address
        if len(self.topics) > 0:
            params["topics"] = self.topics
        return params

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert :class:`LogFilter` to dict
        """
        return {"address": self.address, "topics": self.topics}

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return False

    def __repr__(self):
        return f"LogFilter({json.dumps(self.to_dict())})"


def _normalize_topic(topic: str) -> str:
    if not _is_prefixed_hex(topic, 66):
        raise InvalidArgument(f"Invalid topic: {topic}")
    return topic.lower()


def _is_prefixed_hex(val: Any, length: int) -> bool:
    return (
        isinstance(val, str)
        and val.startswith(("0x", "0X"))
        and is_hex(val)
        and len(val) == length
    )


def event_signature_to_topic(signature: str) -> str:
    """
    Convert event signature to topic0.

    Both the canonical form and the human-readable form
    (with ``event`` keyword, ``indexed`` modifiers and parameter names)
    are supported.

    Args:
        signature: Event signature

    Returns:
        Topic (``0x...``, lowercase)

    Examples:
        ::

            event_signature_to_topic("Transfer(address,address,uint256)")
            event_signature_to_topic(
                "event Transfer(address indexed from, address indexed to, uint256 value)"
            )
            # both are 0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef
    """
    match = re.fullmatch(r"\s*(?:event\s+)?(\w+)\s*\((.*)\)\s*(?:anonymous)?\s*", signature)
    if match is None:
        raise InvalidArgument(f"Invalid event signature: {signature}")
    name, params = match.groups()
    types = [_param_type(p) for p in _split_params(params)]
    canonical = f"{name}({','.join(types)})"
    return encode_hex(event_signature_to_log_topic(canonical))


def _split_params(params: str) -> List[str]:
    # split on top-level commas only, tuples may contain commas
    out, depth, current = [], 0, ""
    for ch in params:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            out.append(current)
            current = ""
        else:
            current += ch
    if current.strip() != "":
        out.append(current)
    return out


def _param_type(param: str) -> str:
    param = param.strip()
    if param.startswith("("):
        depth = 0
        for i, ch in enumerate(param):
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    inner = ",".join(_param_type(p) for p in _split_params(param[1:i]))
                    rest = param[i + 1 :].split()
                    suffix = rest[0] if len(rest) > 0 and rest[0].startswith("[") else ""
                    return f"({inner}){suffix}"
        raise InvalidArgument(f"Invalid event parameter: {param}")
    parts = param.split()
    if len(parts) == 0:
        raise InvalidArgument("Empty event parameter")
    return _canonical_type(parts[0])


def _canonical_type(type_name: str) -> str:
    match = re.fullmatch(r"([a-z]+)((?:\[\d*\])*)", type_name)
    if match is None or not match.group(1) in TYPE_ALIASES:
        return type_name
    base, suffix = match.groups()
    return TYPE_ALIASES[base] + suffix
