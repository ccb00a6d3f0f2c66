"""
Name: In-Memory User Repository

Responsibilities:
  - Store user identities and role memberships in memory
  - Back local development and tests when DATABASE_URL is empty

Constraints:
  - Thread-safe: every operation runs under one Lock
  - Emails and usernames are unique, compared case-insensitively
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional, Set
from uuid import uuid4

from ...domain.entities import UserIdentity
from ...exceptions import Conflict, DatabaseError


class InMemoryUserRepository:
    """R: Dict-backed UserRepository."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[str, UserIdentity] = {}
        self._roles: Set[str] = set()

    def get_by_id(self, user_id: str) -> Optional[UserIdentity]:
        with self._lock:
            return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserIdentity]:
        normalized = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email == normalized:
                    return user
        return None

    def get_by_username(self, username: str) -> Optional[UserIdentity]:
        normalized = username.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.username and user.username.lower() == normalized:
                    return user
        return None

    def create_user(
        self, *, email: str, username: Optional[str], password_hash: str
    ) -> UserIdentity:
        normalized_email = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email == normalized_email:
                    raise Conflict(f"Email '{normalized_email}' is already taken.")
                if (
                    username
                    and user.username
                    and user.username.lower() == username.lower()
                ):
                    raise Conflict(f"Username '{username}' is already taken.")

            user = UserIdentity(
                id=str(uuid4()),
                email=normalized_email,
                username=username,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            return user

    def ensure_role(self, role: str) -> None:
        with self._lock:
            self._roles.add(role)

    def add_to_role(self, user_id: str, role: str) -> UserIdentity:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise DatabaseError(f"User '{user_id}' does not exist")
            self._roles.add(role)
            updated = user.with_roles(user.roles | {role})
            self._users[user_id] = updated
            return updated

    def role_names(self) -> Set[str]:
        with self._lock:
            return set(self._roles)
