"""
Name: Dependency Injection Container

Responsibilities:
  - Wire repositories and services from settings
  - Provide factory functions usable with FastAPI Depends()

Collaborators:
  - infrastructure.repositories: in-memory and PostgreSQL adapters
  - identity: SessionTokenService, ApiKeyService, AccountService

Constraints:
  - Manual DI (no library like dependency-injector)
  - Singletons via functools.lru_cache

Notes:
  - This is the composition root
  - Tests swap implementations with app.dependency_overrides
  - RequestMetrics is not here: it is injected per app in create_app()
"""

from functools import lru_cache

from .config import get_settings
from .domain.repositories import ApiKeyRepository, ShipmentFeed, UserRepository
from .identity.accounts import AccountService
from .identity.api_keys import ApiKeyService
from .identity.tokens import SessionTokenService, TokenSettings
from .infrastructure.repositories import (
    InMemoryApiKeyRepository,
    InMemoryShipmentFeed,
    InMemoryUserRepository,
    PostgresApiKeyRepository,
    PostgresUserRepository,
)


@lru_cache
def get_user_repository() -> UserRepository:
    """R: Postgres when DATABASE_URL is set, in-memory otherwise."""
    if get_settings().uses_postgres():
        return PostgresUserRepository()
    return InMemoryUserRepository()


@lru_cache
def get_api_key_repository() -> ApiKeyRepository:
    if get_settings().uses_postgres():
        return PostgresApiKeyRepository()
    return InMemoryApiKeyRepository()


@lru_cache
def get_shipment_feed() -> ShipmentFeed:
    return InMemoryShipmentFeed()


@lru_cache
def get_token_service() -> SessionTokenService:
    """
    R: Session token service singleton.

    Raises:
        ConfigurationError: JWT_SECRET missing (surfaced at startup)
    """
    return SessionTokenService(TokenSettings.from_settings(get_settings()))


@lru_cache
def get_api_key_service() -> ApiKeyService:
    return ApiKeyService(
        get_api_key_repository(),
        prefix=get_settings().api_key_prefix,
    )


@lru_cache
def get_account_service() -> AccountService:
    return AccountService(get_user_repository(), get_token_service())


def clear_container_cache() -> None:
    """R: Drop cached singletons (tests and settings reloads)."""
    for factory in (
        get_user_repository,
        get_api_key_repository,
        get_shipment_feed,
        get_token_service,
        get_api_key_service,
        get_account_service,
    ):
        factory.cache_clear()
