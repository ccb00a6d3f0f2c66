"""
Name: Domain Repository Interfaces

Responsibilities:
  - Define the credential store contracts the access core calls
  - Provide abstraction over storage technology

Collaborators:
  - domain.entities: UserIdentity, ApiKeyRecord, IntegrationShipment
  - Implementations in infrastructure.repositories

Constraints:
  - Pure interfaces (Protocol), no implementation
  - Storage-agnostic (PostgreSQL or in-memory)

Notes:
  - Using typing.Protocol for structural subtyping
  - Implementations raise DatabaseError on store failures
"""

from datetime import datetime
from typing import List, Optional, Protocol

from .entities import ApiKeyRecord, IntegrationShipment, UserIdentity


class UserRepository(Protocol):
    """
    R: Interface for user identities and role memberships.

    Emails are stored normalized (trimmed, lowercase); username lookups
    are case-insensitive.
    """

    def get_by_id(self, user_id: str) -> Optional[UserIdentity]:
        ...

    def get_by_email(self, email: str) -> Optional[UserIdentity]:
        ...

    def get_by_username(self, username: str) -> Optional[UserIdentity]:
        ...

    def create_user(
        self, *, email: str, username: Optional[str], password_hash: str
    ) -> UserIdentity:
        """R: Persist a new user without roles."""
        ...

    def ensure_role(self, role: str) -> None:
        """R: Create the role if it does not exist yet."""
        ...

    def add_to_role(self, user_id: str, role: str) -> UserIdentity:
        """R: Add a role membership and return the updated identity."""
        ...


class ApiKeyRepository(Protocol):
    """
    R: Interface for integration API keys.

    Records are looked up by id and by exact secret; they are never deleted.
    """

    def add(self, *, name: str, key: str, created_utc: datetime) -> ApiKeyRecord:
        """R: Persist a new active key. Duplicate secrets raise Conflict."""
        ...

    def list_all(self) -> List[ApiKeyRecord]:
        """R: All keys in creation order."""
        ...

    def get_by_id(self, key_id: int) -> Optional[ApiKeyRecord]:
        ...

    def find_by_key(self, key: str) -> Optional[ApiKeyRecord]:
        """R: Exact secret match, active or not."""
        ...

    def deactivate(self, key_id: int) -> Optional[ApiKeyRecord]:
        """R: Set is_active=false; None when the id is unknown."""
        ...


class ShipmentFeed(Protocol):
    """R: Read-only shipment source for the integration endpoint."""

    def list_for_integration(self) -> List[IntegrationShipment]:
        ...
