"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Build isolated services over in-memory stores
  - Build a FastAPI app whose container factories are overridden
  - Provide ready-made admin and user tokens

Notes:
  - Fixtures are function scoped for per-test isolation
  - No database or network access is needed
"""

import os

import pytest
from fastapi.testclient import TestClient

from logitrack import config as app_config

app_config.Settings.model_config["env_file"] = None
os.environ.setdefault("APP_ENV", "test")

from logitrack.container import (  # noqa: E402
    get_account_service,
    get_api_key_service,
    get_shipment_feed,
    get_token_service,
    get_user_repository,
)
from logitrack.identity.accounts import AccountService  # noqa: E402
from logitrack.identity.api_keys import ApiKeyService  # noqa: E402
from logitrack.identity.tokens import SessionTokenService, TokenSettings  # noqa: E402
from logitrack.infrastructure.repositories import (  # noqa: E402
    InMemoryApiKeyRepository,
    InMemoryShipmentFeed,
    InMemoryUserRepository,
)
from logitrack.main import create_app  # noqa: E402
from logitrack.platform.metrics import RequestMetrics  # noqa: E402
from tests.helpers import TEST_SECRET, make_identity  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(
        secret=TEST_SECRET,
        issuer="LogiTrack",
        audience="LogiTrackClients",
        expires_minutes=60,
        clock_skew_seconds=30,
    )


@pytest.fixture
def token_service(token_settings: TokenSettings) -> SessionTokenService:
    return SessionTokenService(token_settings)


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def api_key_repository() -> InMemoryApiKeyRepository:
    return InMemoryApiKeyRepository()


@pytest.fixture
def shipment_feed() -> InMemoryShipmentFeed:
    return InMemoryShipmentFeed()


@pytest.fixture
def api_key_service(api_key_repository: InMemoryApiKeyRepository) -> ApiKeyService:
    return ApiKeyService(api_key_repository)


@pytest.fixture
def account_service(
    user_repository: InMemoryUserRepository, token_service: SessionTokenService
) -> AccountService:
    return AccountService(user_repository, token_service)


@pytest.fixture
def request_metrics() -> RequestMetrics:
    return RequestMetrics()


@pytest.fixture
def app(
    request_metrics,
    token_service,
    api_key_service,
    account_service,
    user_repository,
    shipment_feed,
):
    """R: Application wired to the per-test services."""
    application = create_app(metrics=request_metrics)
    application.dependency_overrides[get_token_service] = lambda: token_service
    application.dependency_overrides[get_api_key_service] = lambda: api_key_service
    application.dependency_overrides[get_account_service] = lambda: account_service
    application.dependency_overrides[get_user_repository] = lambda: user_repository
    application.dependency_overrides[get_shipment_feed] = lambda: shipment_feed
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_token(token_service: SessionTokenService) -> str:
    return token_service.issue(make_identity("Admin", email="admin@example.com")).token


@pytest.fixture
def user_token(token_service: SessionTokenService) -> str:
    return token_service.issue(make_identity("User", email="user@example.com")).token
