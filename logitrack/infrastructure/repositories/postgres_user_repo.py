"""
Name: PostgreSQL User Repository

Responsibilities:
  - Load users (with role memberships) by id, email or username
  - Create users and role memberships
  - Map database rows into UserIdentity records

Notes:
  - Tables: users, roles, user_roles (see alembic 001_initial)
"""

from typing import Optional
from uuid import UUID, uuid4

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ...domain.entities import UserIdentity
from ...exceptions import Conflict, DatabaseError
from ...platform.logger import logger

_USER_SELECT = """
    SELECT u.id, u.email, u.username, u.password_hash, u.created_at,
           COALESCE(
               array_agg(ur.role_name ORDER BY ur.role_name)
                   FILTER (WHERE ur.role_name IS NOT NULL),
               '{}'
           ) AS roles
    FROM users u
    LEFT JOIN user_roles ur ON ur.user_id = u.id
"""


def _row_to_user(row) -> UserIdentity:
    return UserIdentity(
        id=str(row[0]),
        email=row[1],
        username=row[2],
        password_hash=row[3],
        created_at=row[4],
        roles=frozenset(row[5] or ()),
    )


class PostgresUserRepository:
    """R: UserRepository on PostgreSQL (psycopg 3 pool)."""

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool
        from ..db.pool import get_pool

        return get_pool()

    def _fetch_one(self, where: str, value, operation: str) -> Optional[UserIdentity]:
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    f"{_USER_SELECT} WHERE {where} GROUP BY u.id",
                    (value,),
                ).fetchone()
        except Exception as e:
            logger.error(
                "PostgresUserRepository: lookup failed",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"User lookup failed: {operation}") from e
        return _row_to_user(row) if row else None

    def get_by_id(self, user_id: str) -> Optional[UserIdentity]:
        try:
            user_uuid = UUID(str(user_id))
        except ValueError:
            return None
        return self._fetch_one("u.id = %s::uuid", str(user_uuid), "get_by_id")

    def get_by_email(self, email: str) -> Optional[UserIdentity]:
        return self._fetch_one("u.email = %s", email.strip().lower(), "get_by_email")

    def get_by_username(self, username: str) -> Optional[UserIdentity]:
        return self._fetch_one(
            "lower(u.username) = %s", username.strip().lower(), "get_by_username"
        )

    def create_user(
        self, *, email: str, username: Optional[str], password_hash: str
    ) -> UserIdentity:
        user_id = uuid4()
        normalized_email = email.strip().lower()
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    """
                    INSERT INTO users (id, email, username, password_hash)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id, email, username, password_hash, created_at
                    """,
                    (user_id, normalized_email, username, password_hash),
                ).fetchone()
        except pg_errors.UniqueViolation as e:
            raise Conflict("Email or username is already taken.") from e
        except Exception as e:
            logger.error(
                "PostgresUserRepository: create user failed",
                extra={"operation": "create_user", "user_id": str(user_id), "error": str(e)},
            )
            raise DatabaseError("User creation failed") from e

        if not row:
            raise DatabaseError("User creation failed: no row returned")
        return _row_to_user((*row, ()))

    def ensure_role(self, role: str) -> None:
        try:
            with self._get_pool().connection() as conn:
                conn.execute(
                    "INSERT INTO roles (name) VALUES (%s) ON CONFLICT (name) DO NOTHING",
                    (role,),
                )
        except Exception as e:
            logger.error(
                "PostgresUserRepository: ensure role failed",
                extra={"operation": "ensure_role", "role": role, "error": str(e)},
            )
            raise DatabaseError("Role creation failed") from e

    def add_to_role(self, user_id: str, role: str) -> UserIdentity:
        try:
            with self._get_pool().connection() as conn:
                conn.execute(
                    "INSERT INTO roles (name) VALUES (%s) ON CONFLICT (name) DO NOTHING",
                    (role,),
                )
                conn.execute(
                    """
                    INSERT INTO user_roles (user_id, role_name)
                    VALUES (%s::uuid, %s)
                    ON CONFLICT DO NOTHING
                    """,
                    (user_id, role),
                )
        except Exception as e:
            logger.error(
                "PostgresUserRepository: add role failed",
                extra={
                    "operation": "add_to_role",
                    "user_id": user_id,
                    "role": role,
                    "error": str(e),
                },
            )
            raise DatabaseError("Role assignment failed") from e

        user = self.get_by_id(user_id)
        if user is None:
            raise DatabaseError(f"User '{user_id}' vanished after role assignment")
        return user
