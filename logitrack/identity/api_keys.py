"""
Name: Integration API Key Service

Responsibilities:
  - Create API keys with generated secrets (returned once, at creation)
  - List keys and deactivate them idempotently
  - Authenticate an inbound secret against active keys

Collaborators:
  - domain.repositories.ApiKeyRepository: storage
  - identity/key_generator.py: secret generation
  - identity/access.py: require_api_key() dependency

Constraints:
  - Never log raw API keys (a short SHA-256 fingerprint is logged instead)
  - Every authentication failure is one Unauthenticated outcome;
    the reason is logged, not surfaced

Notes:
  - Secrets are stored retrievable, compared by exact match
"""

import hashlib
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..domain.entities import ApiKeyRecord
from ..domain.repositories import ApiKeyRepository
from ..exceptions import NotFound, Unauthenticated, ValidationError
from ..platform.logger import logger
from .key_generator import DEFAULT_PREFIX, generate_api_key

MAX_NAME_LENGTH = 200


def fingerprint(key: str) -> str:
    """R: Hash API key for safe logging (never log raw keys)."""
    return hashlib.sha256(key.encode()).hexdigest()[:12]


class ApiKeyService:
    def __init__(
        self,
        repository: ApiKeyRepository,
        prefix: str = DEFAULT_PREFIX,
        key_factory: Optional[Callable[[], str]] = None,
    ):
        self._repository = repository
        self._key_factory = key_factory or (lambda: generate_api_key(prefix))

    def create(self, name: Optional[str]) -> ApiKeyRecord:
        """
        R: Create an active key and return it with its plaintext secret.

        Raises:
            ValidationError: blank or overlong name
        """
        if name is None or not name.strip():
            logger.warning("Attempt to create API key with empty or whitespace name.")
            raise ValidationError(
                "Name is required.",
                errors=[{"field": "name", "message": "Name is required."}],
            )
        trimmed = name.strip()
        if len(trimmed) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Name must be at most {MAX_NAME_LENGTH} characters.",
                errors=[{"field": "name", "message": "Name is too long."}],
            )

        record = self._repository.add(
            name=trimmed,
            key=self._key_factory(),
            created_utc=datetime.now(timezone.utc),
        )
        logger.info(
            "API key created",
            extra={
                "api_key_id": record.id,
                "api_key_name": record.name,
                "is_active": record.is_active,
            },
        )
        return record

    def list(self) -> List[ApiKeyRecord]:
        records = self._repository.list_all()
        logger.info("API keys listed", extra={"count": len(records)})
        return records

    def deactivate(self, key_id: int) -> ApiKeyRecord:
        """
        R: Set is_active=false. Already inactive keys succeed as a no-op.

        Raises:
            NotFound: unknown id (nothing is created)
        """
        existing = self._repository.get_by_id(key_id)
        if existing is None:
            logger.warning(
                "Attempt to deactivate non-existing API key",
                extra={"api_key_id": key_id},
            )
            raise NotFound("API key", key_id)

        if not existing.is_active:
            logger.info(
                "API key already inactive (no-op)",
                extra={"api_key_id": key_id},
            )

        updated = self._repository.deactivate(key_id)
        if updated is None:
            raise NotFound("API key", key_id)

        logger.info(
            "API key deactivated",
            extra={"api_key_id": updated.id, "api_key_name": updated.name},
        )
        return updated

    def authenticate(self, secret: Optional[str]) -> ApiKeyRecord:
        """
        R: Resolve an active key by exact secret.

        Raises:
            Unauthenticated: missing, unknown or inactive key
        """
        if not secret:
            logger.warning("API key auth failed", extra={"reason": "missing"})
            raise Unauthenticated("Missing API key.")

        record = self._repository.find_by_key(secret)
        if record is None:
            logger.warning(
                "API key auth failed",
                extra={"reason": "unknown", "key_hash": fingerprint(secret)},
            )
            raise Unauthenticated("Invalid or inactive API key.")

        if not record.is_active:
            logger.warning(
                "API key auth failed",
                extra={
                    "reason": "inactive",
                    "api_key_id": record.id,
                    "key_hash": fingerprint(secret),
                },
            )
            raise Unauthenticated("Invalid or inactive API key.")

        return record
