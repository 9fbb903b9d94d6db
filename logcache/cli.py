"""Command line tool for fetching logs through the cache."""

import json
import logging
import os
import sys
from typing import List

import typer
from eth_utils import is_hex

from logcache.blocks.service import BlockTag
from logcache.errors import LogCacheError
from logcache.filters.log_filter import LogFilter, event_signature_to_topic
from logcache.logs.log import Log
from logcache.logs.service import LogsService
from logcache.ranges.block_range import BlockRange
from logcache.utils import print_progress, short_address

DEFAULT_RPC_URL = "http://localhost:8545"

app = typer.Typer(
    name="logcache",
    help="Fetch Ethereum logs, caching logs of finalized blocks in an sqlite3 database",
    add_completion=False,
)


@app.command()
def main(
    sig_or_topic: str | None = typer.Argument(
        None,
        help="Event signature (converted to the first topic) or the first topic itself",
    ),
    topics: List[str] | None = typer.Argument(
        None, help="The remaining topics of the filter"
    ),
    from_block: str = typer.Option(
        "earliest", "--from-block", "-f", help="The block height to start query at"
    ),
    to_block: str = typer.Option(
        "latest", "--to-block", "-t", help="The block height to stop query at"
    ),
    address: str | None = typer.Option(
        None, "--address", "-a", help="The contract address to filter on"
    ),
    rpc_url: str | None = typer.Option(
        None,
        "--rpc-url",
        "-r",
        help=f"RPC url. Defaults to WEB3_PROVIDER_URI env var or {DEFAULT_RPC_URL}",
    ),
    page_size: int | None = typer.Option(
        None,
        "--page-size",
        "-p",
        help="The block range per eth_getLogs request. "
        "Defaults to WEB3_LOGS_PAGE_SIZE env var or 1000",
    ),
    db_path: str | None = typer.Option(
        None,
        "--db-path",
        help="Path to the cache database. Defaults to WEB3_CACHE_PATH env var",
    ),
    nosave: bool = typer.Option(False, "--nosave", help="Do not save logs to a database"),
    show_progress: bool = typer.Option(
        False, "--show-progress", "-s", help="Show progress of fetching logs"
    ),
    hide_result: bool = typer.Option(
        False, "--hide-result", "-i", help="Hide the result of fetching logs"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Fetch logs matching the signature / topics and print them as json.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    cache_path = ":memory:" if nosave else db_path or os.environ.get("WEB3_CACHE_PATH")
    if cache_path is None:
        typer.echo(
            "No database path provided, set WEB3_CACHE_PATH env var or use --db-path option",
            err=True,
        )
        raise typer.Exit(code=1)

    rpc = rpc_url or os.environ.get("WEB3_PROVIDER_URI") or DEFAULT_RPC_URL
    service = LogsService.create(rpc=rpc, cache_path=cache_path, page_size=page_size)
    try:
        log_filter = LogFilter(address=address, topics=_filter_topics(sig_or_topic, topics))
        prefix = f"Fetching logs@{short_address(log_filter.address)}"

        def finalized_callback(
            _logs: List[Log],
            _batch_logs: List[Log],
            _batch_from: int,
            _batch_to: int,
            _missing_ranges: List[BlockRange],
            _range_index: int,
            total_scanned_blocks: int,
            blocks_to_scan: int,
        ):
            if show_progress:
                print_progress(
                    total_scanned_blocks, blocks_to_scan, prefix=prefix, file=sys.stderr
                )

        def unfinalized_callback(
            _logs: List[Log], _batch_logs: List[Log], batch_from: int, batch_to: int
        ):
            if show_progress:
                typer.echo(f"Unfinalized blocks {batch_from} to {batch_to}", err=True)

        logs = service.get_logs(
            log_filter,
            from_block=_block_tag(from_block),
            to_block=_block_tag(to_block),
            page_size=page_size,
            finalized_callback=finalized_callback,
            unfinalized_callback=unfinalized_callback,
        )
    except (LogCacheError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        service.close()

    if not hide_result:
        typer.echo(json.dumps([l.to_dict() for l in logs], indent=2))


def _filter_topics(sig_or_topic: str | None, topics: List[str] | None) -> List[str]:
    out = []
    if not sig_or_topic is None:
        if is_hex(sig_or_topic):
            out.append(sig_or_topic)
        else:
            out.append(event_signature_to_topic(sig_or_topic))
    out.extend(topics or [])
    return out


def _block_tag(value: str) -> BlockTag:
    try:
        return int(value)
    except ValueError:
        return value


if __name__ == "__main__":
    app()
