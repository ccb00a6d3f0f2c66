"""
Name: PostgreSQL API Key Repository

Responsibilities:
  - Persist API keys (serial id, unique secret) and flip is_active
  - Look keys up by id and by exact secret

Constraints:
  - Logs carry the key id, never the secret
  - The unique index on api_keys.key backs secret uniqueness
"""

from datetime import datetime
from typing import List, Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ...domain.entities import ApiKeyRecord
from ...exceptions import Conflict, DatabaseError
from ...platform.logger import logger

_COLUMNS = "id, name, key, is_active, created_utc"

# R: api_keys.id is a serial (int4)
_MAX_KEY_ID = 2_147_483_647


def _is_storable_id(key_id: int) -> bool:
    return 1 <= key_id <= _MAX_KEY_ID


def _row_to_record(row) -> ApiKeyRecord:
    return ApiKeyRecord(
        id=row[0],
        name=row[1],
        key=row[2],
        is_active=row[3],
        created_utc=row[4],
    )


class PostgresApiKeyRepository:
    """R: ApiKeyRepository on PostgreSQL (psycopg 3 pool)."""

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool
        from ..db.pool import get_pool

        return get_pool()

    def add(self, *, name: str, key: str, created_utc: datetime) -> ApiKeyRecord:
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    f"""
                    INSERT INTO api_keys (name, key, is_active, created_utc)
                    VALUES (%s, %s, true, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (name, key, created_utc),
                ).fetchone()
        except pg_errors.UniqueViolation as e:
            raise Conflict("API key secret already exists.") from e
        except Exception as e:
            logger.error(
                "PostgresApiKeyRepository: insert failed",
                extra={"operation": "add", "api_key_name": name, "error": str(e)},
            )
            raise DatabaseError("API key creation failed") from e

        if not row:
            raise DatabaseError("API key creation failed: no row returned")
        return _row_to_record(row)

    def list_all(self) -> List[ApiKeyRecord]:
        try:
            with self._get_pool().connection() as conn:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM api_keys ORDER BY id"
                ).fetchall()
        except Exception as e:
            logger.error(
                "PostgresApiKeyRepository: list failed",
                extra={"operation": "list_all", "error": str(e)},
            )
            raise DatabaseError("API key listing failed") from e
        return [_row_to_record(row) for row in rows]

    def get_by_id(self, key_id: int) -> Optional[ApiKeyRecord]:
        if not _is_storable_id(key_id):
            return None
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM api_keys WHERE id = %s",
                    (key_id,),
                ).fetchone()
        except Exception as e:
            logger.error(
                "PostgresApiKeyRepository: get by id failed",
                extra={"operation": "get_by_id", "api_key_id": key_id, "error": str(e)},
            )
            raise DatabaseError("API key lookup failed") from e
        return _row_to_record(row) if row else None

    def find_by_key(self, key: str) -> Optional[ApiKeyRecord]:
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM api_keys WHERE key = %s",
                    (key,),
                ).fetchone()
        except Exception as e:
            logger.error(
                "PostgresApiKeyRepository: lookup by secret failed",
                extra={"operation": "find_by_key", "error": str(e)},
            )
            raise DatabaseError("API key lookup failed") from e
        return _row_to_record(row) if row else None

    def deactivate(self, key_id: int) -> Optional[ApiKeyRecord]:
        if not _is_storable_id(key_id):
            return None
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    f"""
                    UPDATE api_keys
                    SET is_active = false
                    WHERE id = %s
                    RETURNING {_COLUMNS}
                    """,
                    (key_id,),
                ).fetchone()
        except Exception as e:
            logger.error(
                "PostgresApiKeyRepository: deactivate failed",
                extra={"operation": "deactivate", "api_key_id": key_id, "error": str(e)},
            )
            raise DatabaseError("API key deactivation failed") from e
        return _row_to_record(row) if row else None
