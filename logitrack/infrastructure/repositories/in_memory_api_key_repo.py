"""
Name: In-Memory API Key Repository

Responsibilities:
  - Store API key records in memory with store-assigned integer ids
  - Index records by exact secret for constant-time lookups

Constraints:
  - Thread-safe: every operation runs under one Lock
  - Secrets are unique; a duplicate insert raises Conflict
  - Records are never removed
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from threading import Lock
from typing import Dict, List, Optional

from ...domain.entities import ApiKeyRecord
from ...exceptions import Conflict


class InMemoryApiKeyRepository:
    """R: Dict-backed ApiKeyRepository."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._next_id = 1
        self._by_id: Dict[int, ApiKeyRecord] = {}
        self._id_by_key: Dict[str, int] = {}

    def add(self, *, name: str, key: str, created_utc: datetime) -> ApiKeyRecord:
        with self._lock:
            if key in self._id_by_key:
                raise Conflict("API key secret already exists.")
            record = ApiKeyRecord(
                id=self._next_id,
                name=name,
                key=key,
                is_active=True,
                created_utc=created_utc,
            )
            self._next_id += 1
            self._by_id[record.id] = record
            self._id_by_key[key] = record.id
            return record

    def list_all(self) -> List[ApiKeyRecord]:
        with self._lock:
            return [self._by_id[key_id] for key_id in sorted(self._by_id)]

    def get_by_id(self, key_id: int) -> Optional[ApiKeyRecord]:
        with self._lock:
            return self._by_id.get(key_id)

    def find_by_key(self, key: str) -> Optional[ApiKeyRecord]:
        with self._lock:
            key_id = self._id_by_key.get(key)
            return self._by_id.get(key_id) if key_id is not None else None

    def deactivate(self, key_id: int) -> Optional[ApiKeyRecord]:
        with self._lock:
            record = self._by_id.get(key_id)
            if record is None:
                return None
            updated = replace(record, is_active=False)
            self._by_id[key_id] = updated
            return updated
