"""
Name: Domain Entities

Responsibilities:
  - Define the records the access core reads and writes
  - Keep them storage-agnostic (no SQL, no HTTP)

Notes:
  - UserIdentity is owned by the credential store; the core never deletes it
  - ApiKeyRecord.key is immutable once created; only is_active changes
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class UserIdentity:
    """R: User account as resolved from the credential store."""

    id: str
    email: str
    password_hash: str
    username: Optional[str] = None
    roles: frozenset[str] = field(default_factory=frozenset)
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """R: Username, falling back to email."""
        return self.username or self.email

    def with_roles(self, roles) -> "UserIdentity":
        return replace(self, roles=frozenset(roles))


@dataclass(frozen=True)
class ApiKeyRecord:
    """R: Integration API key; the secret never changes after creation."""

    id: int
    name: str
    key: str
    is_active: bool
    created_utc: datetime


@dataclass(frozen=True)
class IntegrationShipment:
    """R: Read-only shipment row exposed to integration callers."""

    id: int
    reference: str
    status: str
    customer: Optional[str] = None
    vehicle: Optional[str] = None
    distance_km: float = 0.0
    weight_kg: float = 0.0
    price: Decimal = Decimal("0")
    created_utc: Optional[datetime] = None
