"""
Implements :class:`Core` that is used in other modules.
"""

import os
import sqlite3
from contextlib import contextmanager
from sqlite3 import Connection, connect
from functools import cached_property
from typing import Iterator
from web3 import Web3

from logcache.errors import InvalidArgument, StoreFailure

DEFAULT_PAGE_SIZE = 1000
web3_cache = {}
db_cache = {}
chain_id_cache = {}


class Core:
    """
    A base class for any class that wants to use
    an Ethereum RPC or Sqlite3 cache database.

    When deriving this class, you're providing arguments like rpc url
    or OS path to the database. The resources are instantiated
    on demand though. It means that if you're just using the Ethereum
    RPC it's sufficient to supply only the rpc endpoint and skip OS path
    to the database in the constructor.

    So this class lightweight and safe to derive from any other
    class.

    **Caching**

    The web3 instance and chain_id are cached by the rpc url key.
    The sqlite3 connection is cached by the OS path of the database.

    Repos and services created with the same arguments therefore share
    a single connection, which is what makes a transaction opened by one
    of them cover the writes of the others.

    While this might not work well in a multi-threaded scenario, for
    single-threaded there's no overhead like making new connections
    and, for example, querying chain_id each time it's accessed.

    **Transactions**

    All writes go through :meth:`transaction`. It commits on success,
    rolls back on any error and reports database errors as
    :class:`logcache.errors.StoreFailure`.

    Args:
        rpc: An https Ethereum RPC endpoint uri
        cache_path: OS path to the cache database (``:memory:`` is allowed)
        page_size: Default number of blocks per ``eth_getLogs`` request.
            Falls back to ``WEB3_LOGS_PAGE_SIZE`` env variable, then to 1000
        w3: an instance of web3 (overrides rpc)
        conn: an instance of database connection (overrides cache_path)
    """

    #: An https Ethereum RPC endpoint uri.
    #: Can be ``None`` if :class:`web3.Web3` is injected directly.
    rpc: str | None
    #: OS path to the cache database.
    #: Can be ``None`` if :class:`sqlite3.Connection` is injected directly.
    cache_path: str | None
    _page_size: int | None

    def __init__(
        self,
        rpc: str | None = None,
        cache_path: str | None = None,
        page_size: int | None = None,
        w3: Web3 | None = None,
        conn: Connection | None = None,
    ):
        self.rpc = rpc
        self.cache_path = cache_path
        self._page_size = page_size
        self._w3 = w3
        self._conn = conn

    @cached_property
    def page_size(self) -> int:
        """
        Default number of blocks fetched with one ``eth_getLogs`` request.
        An explicit ``page_size`` argument wins over ``WEB3_LOGS_PAGE_SIZE``.
        """
        if not self._page_size is None:
            return self._page_size
        env_value = os.environ.get("WEB3_LOGS_PAGE_SIZE")
        if not env_value is None:
            try:
                return int(env_value)
            except ValueError as e:
                raise InvalidArgument(
                    f"Invalid WEB3_LOGS_PAGE_SIZE value: {env_value}"
                ) from e
        return DEFAULT_PAGE_SIZE

    @cached_property
    def chain_id(self) -> int:
        """
        Chain id for the current web3 connection
        """
        if not self.rpc:
            return self.w3.eth.chain_id

        if not self.rpc in chain_id_cache:
            chain_id_cache[self.rpc] = self.w3.eth.chain_id

        return chain_id_cache[self.rpc]

    @cached_property
    def w3(self) -> Web3:
        """
        :class:`web3.Web3` instance for working with Ethereum RPC
        """
        if not self._w3 is None:
            return self._w3

        if self.rpc is None:
            self.rpc = os.environ.get("WEB3_PROVIDER_URI")

        if self.rpc is None:
            raise ValueError(
                "Ethereum RPC is not set. "
                "Use `WEB3_PROVIDER_URI` env variable or pass rpc explicitly"
            )

        if not self.rpc in web3_cache:
            web3_cache[self.rpc] = Web3(Web3.HTTPProvider(self.rpc))

        return web3_cache[self.rpc]

    @cached_property
    def conn(self) -> Connection:
        """
        :class:`sqlite3.Connection` to a database cache
        """
        if not self._conn is None:
            return self._conn

        if self.cache_path is None:
            self.cache_path = os.environ.get("WEB3_CACHE_PATH")

        if self.cache_path is None:
            raise ValueError(
                "Cache database path is not set. "
                "Use `WEB3_CACHE_PATH` env variable or pass cache_path explicitly"
            )

        if not self.cache_path in db_cache:
            db_cache[self.cache_path] = connection_from_path(self.cache_path)

        return db_cache[self.cache_path]

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """
        Run a block of statements as one transaction.

        Example:
            ::

                with repo.transaction():
                    logs_repo.save(filter_id, logs)
                    ranges_repo.insert_range(filter_id, block_range)

        Raises:
            StoreFailure: if any statement or the commit fails.
            The transaction is rolled back in this case.
        """
        conn = self.conn
        try:
            # reads before the first write must be part of the transaction too
            if not conn.in_transaction:
                conn.execute("BEGIN")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreFailure(str(e)) from e
        except BaseException:
            conn.rollback()
            raise

    def close(self):
        """
        Close the database connection and forget it.
        """
        if not self._conn is None:
            self._conn.close()
            return
        if self.cache_path in db_cache:
            db_cache.pop(self.cache_path).close()
        self.__dict__.pop("conn", None)


def connection_from_path(path: str) -> Connection:
    """
    Creates a connection to a database at ``path``
    and makes sure the schema exists.

    Args:
        path: The absolute path to the database, or ``:memory:``

    Returns:
        An instance of sqlite3 Connection

    Note:
        The schema migrations are currently not supported.
    """

    try:
        conn = connect(path)
        init_db(conn)
    except sqlite3.Error as e:
        raise StoreFailure(f"Couldn't open cache database at {path}: {e}") from e
    return conn


def init_db(conn: Connection):
    """
    Initialize db schema. Safe to call on an existing database.

    Args:
        conn: Connection to the database
    """
    cursor = conn.cursor()
    # Logs table
    cursor.execute(
        """CREATE TABLE IF NOT EXISTS logs
            (filter_id text, block_number integer, log_index integer, data text)"""
    )
    cursor.execute(
        """CREATE UNIQUE INDEX IF NOT EXISTS idx_logs_id \
        ON logs(filter_id,block_number,log_index)
    """
    )
    cursor.execute(
        """CREATE INDEX IF NOT EXISTS idx_logs_filter_id ON logs(filter_id)"""
    )

    # Fetched ranges table
    cursor.execute(
        """CREATE TABLE IF NOT EXISTS fetched_ranges
            (filter_id text, from_block integer, to_block integer)"""
    )
    cursor.execute(
        """CREATE INDEX IF NOT EXISTS idx_fetched_ranges_filter_id \
        ON fetched_ranges(filter_id)
    """
    )

    conn.commit()
