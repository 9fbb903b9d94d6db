from hypothesis import given
from hexbytes import HexBytes
from web3.datastructures import AttributeDict

from fixtures.general import TOKEN_ADDRESS, TRANSFER_TOPIC
from logs.strategies import log
from logcache.logs.log import Log


@given(log())
def test_log_rows(log: Log):
    filter_id, *row = log.to_row("0x1234")
    assert filter_id == "0x1234"
    restored = Log.from_row(tuple(row))
    assert restored.block_number == log.block_number
    assert restored.log_index == log.log_index
    assert restored.payload == log.payload


def test_log_from_web3():
    entry = AttributeDict(
        {
            "address": TOKEN_ADDRESS,
            "blockNumber": 15,
            "logIndex": 3,
            "topics": [HexBytes(TRANSFER_TOPIC)],
            "data": HexBytes("0x01"),
            "transactionHash": HexBytes("0xabcd"),
        }
    )
    log = Log.from_web3(entry)
    assert log.block_number == 15
    assert log.log_index == 3
    assert log.address == TOKEN_ADDRESS
    assert log.topics == [TRANSFER_TOPIC]
    assert log.transaction_hash == "0xabcd"
    assert log.payload["data"] == "0x01"
    assert Log.from_dict(log.to_dict()) == log
