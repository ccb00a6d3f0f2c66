from .in_memory_api_key_repo import InMemoryApiKeyRepository
from .in_memory_shipment_feed import InMemoryShipmentFeed
from .in_memory_user_repo import InMemoryUserRepository
from .postgres_api_key_repo import PostgresApiKeyRepository
from .postgres_user_repo import PostgresUserRepository

__all__ = [
    "InMemoryApiKeyRepository",
    "InMemoryShipmentFeed",
    "InMemoryUserRepository",
    "PostgresApiKeyRepository",
    "PostgresUserRepository",
]
