from typing import List, Tuple
import pytest

from fixtures.general import TOKEN_ADDRESS, TRANSFER_TOPIC, Web3Mock
from logcache.errors import InvalidArgument, UpstreamFetchFailure
from logcache.filters.log_filter import LogFilter
from logcache.logs.fetcher import LogsFetcher
from logcache.logs.log import Log
from logcache.ranges.block_range import BlockRange

TRANSFERS = LogFilter(address=TOKEN_ADDRESS, topics=[TRANSFER_TOPIC])


def test_fetch_logs_pages(logs_fetcher: LogsFetcher, w3_mock: Web3Mock):
    batches: List[Tuple[int, int, int, int]] = []

    def callback(logs: List[Log], batch_logs: List[Log], batch_from: int, batch_to: int):
        batches.append((len(logs), len(batch_logs), batch_from, batch_to))

    logs = logs_fetcher.fetch_logs(TRANSFERS, BlockRange(100, 349), 100, callback)

    assert w3_mock.get_logs_calls == [(100, 199), (200, 299), (300, 349)]
    assert [(b[2], b[3]) for b in batches] == w3_mock.get_logs_calls
    assert [b[0] for b in batches] == [
        sum(b[1] for b in batches[: i + 1]) for i in range(len(batches))
    ]
    expected = w3_mock.expected_logs(TRANSFERS.to_params(BlockRange(100, 349)))
    assert logs == [Log.from_web3(e) for e in expected]
    assert all(l.topics[0] == TRANSFER_TOPIC for l in logs)


def test_fetch_logs_single_block_pages(logs_fetcher: LogsFetcher, w3_mock: Web3Mock):
    logs_fetcher.fetch_logs(TRANSFERS, BlockRange(7, 9), 1)
    assert w3_mock.get_logs_calls == [(7, 7), (8, 8), (9, 9)]


def test_fetch_logs_invalid_page_size(logs_fetcher: LogsFetcher, w3_mock: Web3Mock):
    with pytest.raises(InvalidArgument):
        logs_fetcher.fetch_logs(TRANSFERS, BlockRange(0, 10), 0)
    assert w3_mock.get_logs_calls == []


def test_fetch_logs_fails_fast(logs_fetcher: LogsFetcher, w3_mock: Web3Mock):
    w3_mock.fail_at_block = 250
    batches = []
    with pytest.raises(UpstreamFetchFailure):
        logs_fetcher.fetch_logs(
            TRANSFERS,
            BlockRange(100, 400),
            100,
            lambda logs, batch, f, t: batches.append((f, t)),
        )
    assert batches == [(100, 199)]
    assert w3_mock.get_logs_calls == [(100, 199), (200, 299)]
