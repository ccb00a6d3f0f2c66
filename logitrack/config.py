"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Expose the JWT, API key, storage and seeding knobs

Collaborators:
  - main.py: reads settings for CORS and startup wiring
  - container.py: builds services and repositories from settings
  - identity/tokens.py: TokenSettings derived from the jwt_* fields

Constraints:
  - No business logic, pure configuration
  - An empty JWT_SECRET is accepted here and rejected when the token
    service is built (ConfigurationError at startup, not per request)

Notes:
  - Singleton via lru_cache
  - Empty DATABASE_URL selects the in-memory stores
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production)
        database_url: PostgreSQL connection string (empty: in-memory stores)
        allowed_origins: Comma-separated CORS origins
        jwt_secret: Symmetric secret for HS256 session tokens
        jwt_issuer: `iss` claim written and required on validation
        jwt_audience: `aud` claim written and required on validation
        jwt_expires_minutes: Session token lifetime
        jwt_clock_skew_seconds: Leeway applied to exp/iat checks
        api_key_header: Header carrying integration API keys
        api_key_prefix: Literal tag prepended to generated API keys
        seed_default_users: Create Admin/User roles and default accounts
    """

    app_env: str = "development"
    log_level: str = "INFO"

    # Storage
    database_url: str = ""
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000

    # CORS configuration
    allowed_origins: str = "http://localhost:5173"
    cors_allow_credentials: bool = False

    # Security - JWT session tokens
    jwt_secret: str = ""
    jwt_issuer: str = "LogiTrack"
    jwt_audience: str = "LogiTrackClients"
    jwt_expires_minutes: int = 120
    jwt_clock_skew_seconds: int = 30

    # Security - Integration API keys
    api_key_header: str = "X-API-Key"
    api_key_prefix: str = "LT_API_"

    # Seeding
    seed_default_users: bool = False
    seed_admin_username: str = "admin"
    seed_admin_email: str = "admin@example.com"
    seed_admin_password: str = "Admin123!"
    seed_user_username: str = "user1"
    seed_user_email: str = "user@example.com"
    seed_user_password: str = "User123!"

    @field_validator("jwt_expires_minutes")
    @classmethod
    def expires_minutes_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("jwt_expires_minutes must be >= 0")
        return v

    @field_validator("jwt_clock_skew_seconds")
    @classmethod
    def clock_skew_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("jwt_clock_skew_seconds must be >= 0")
        return v

    @field_validator("api_key_header")
    @classmethod
    def api_key_header_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("api_key_header must not be blank")
        return v.strip()

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def uses_postgres(self) -> bool:
        return bool(self.database_url.strip())

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
