"""
Name: PostgreSQL Connection Pool

Responsibilities:
  - Manage connection pool lifecycle (init, get, close)
  - Configure connections with statement_timeout
  - Provide singleton pool instance

Collaborators:
  - psycopg_pool: Connection pooling
  - config: Pool settings

Constraints:
  - Singleton pattern (one pool per process)
  - Must init before use, close on shutdown
"""

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...platform.logger import logger

# R: Singleton pool instance
_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def _configure_connection(conn) -> None:
    """R: Apply statement_timeout to each new connection."""
    from ...config import get_settings

    timeout_ms = get_settings().db_statement_timeout_ms
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {int(timeout_ms)}")
        conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    """
    R: Initialize the connection pool.

    Raises:
        RuntimeError: If pool already initialized
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            raise RuntimeError("Connection pool already initialized")

        logger.info(
            "Initializing connection pool",
            extra={"min_size": min_size, "max_size": max_size},
        )

        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_configure_connection,
            open=True,
        )
        return _pool


def get_pool() -> ConnectionPool:
    """
    R: Get the connection pool singleton.

    Raises:
        RuntimeError: If pool not initialized
    """
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    return _pool


def close_pool() -> None:
    """R: Close the connection pool. Safe to call if never initialized."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            logger.info("Closing connection pool")
            _pool.close()
            _pool = None
