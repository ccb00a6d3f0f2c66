"""
Name: Authorization Gate

Responsibilities:
  - Declare per-route access policies (Anonymous, AuthenticatedAny,
    RequiresRoles) and evaluate them as FastAPI dependencies
  - Resolve bearer session tokens into a Principal on request.state
  - Provide the separate X-API-Key gate for integration routes

Collaborators:
  - identity/tokens.py: SessionTokenService.validate
  - identity/api_keys.py: ApiKeyService.authenticate
  - container.py: service factories (overridable in tests)
  - platform/error_responses.py: 401/403 problem responses

Constraints:
  - Missing or invalid credential -> 401; valid but no required role -> 403
  - Expired and forged tokens are indistinguishable to the caller
  - A route uses either the bearer gate or the API key gate, never both

Notes:
  - Each dependency exposes `_policy` so route policies can be asserted
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from fastapi import Depends, Header, Request

from ..config import Settings, get_settings
from ..container import get_api_key_service, get_token_service
from ..exceptions import Unauthenticated
from ..platform.context import subject_var
from ..platform.error_responses import forbidden, unauthorized
from ..platform.logger import logger
from .api_keys import ApiKeyService
from .roles import Role
from .tokens import SessionTokenService, TokenClaims


@dataclass(frozen=True)
class Anonymous:
    """R: No credential required."""


@dataclass(frozen=True)
class AuthenticatedAny:
    """R: Any valid session token."""


@dataclass(frozen=True)
class RequiresRoles:
    """R: Valid session token holding at least one of `roles`."""

    roles: frozenset[str]

    def __post_init__(self):
        if not self.roles:
            raise ValueError("RequiresRoles needs at least one role")


AccessPolicy = Union[Anonymous, AuthenticatedAny, RequiresRoles]


@dataclass(frozen=True)
class Principal:
    """R: Caller resolved from a session token."""

    subject: str
    name: str
    email: str
    roles: frozenset[str]
    claims: TokenClaims


@dataclass(frozen=True)
class IntegrationPrincipal:
    """R: Caller resolved from an integration API key."""

    key_id: int
    key_name: str


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def evaluate_policy(
    policy: AccessPolicy,
    authorization: Optional[str],
    tokens: SessionTokenService,
) -> Optional[Principal]:
    """
    R: Run the gate for one request.

    Raises:
        AppHTTPException 401: missing/invalid token
        AppHTTPException 403: required role missing
    """
    if isinstance(policy, Anonymous):
        return None

    token = extract_bearer_token(authorization)
    if not token:
        raise unauthorized("Missing bearer token.")

    try:
        claims = tokens.validate(token)
    except Unauthenticated as exc:
        raise unauthorized("Invalid or expired token.") from exc

    principal = Principal(
        subject=claims.subject,
        name=claims.name,
        email=claims.email,
        roles=frozenset(claims.roles),
        claims=claims,
    )

    if isinstance(policy, RequiresRoles) and not claims.has_any_role(policy.roles):
        logger.warning(
            "Access denied: insufficient role",
            extra={
                "user_id": principal.subject,
                "required_roles": sorted(policy.roles),
            },
        )
        raise forbidden("Insufficient role.")

    return principal


def require_policy(policy: AccessPolicy) -> Callable:
    """R: FastAPI dependency enforcing `policy` for a route."""
    if isinstance(policy, Anonymous):

        async def anonymous_dependency() -> None:
            return None

        anonymous_dependency._policy = policy
        return anonymous_dependency

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
        tokens: SessionTokenService = Depends(get_token_service),
    ) -> Principal:
        principal = evaluate_policy(policy, authorization, tokens)
        request.state.principal = principal
        subject_var.set(principal.subject)
        return principal

    dependency._policy = policy
    return dependency


def allow_anonymous() -> Callable:
    return require_policy(Anonymous())


def require_user() -> Callable:
    """R: Any authenticated user."""
    return require_policy(AuthenticatedAny())


def require_roles(*roles: Union[Role, str]) -> Callable:
    """R: Authenticated user holding at least one of `roles`."""
    names = frozenset(role.value if isinstance(role, Role) else str(role) for role in roles)
    return require_policy(RequiresRoles(names))


def require_admin() -> Callable:
    return require_roles(Role.ADMIN)


def require_api_key() -> Callable:
    """
    R: FastAPI dependency for integration routes (API key header).

    Raises:
        AppHTTPException 401: missing, unknown or inactive key
    """

    async def dependency(
        request: Request,
        settings: Settings = Depends(get_settings),
        api_keys: ApiKeyService = Depends(get_api_key_service),
    ) -> IntegrationPrincipal:
        secret = request.headers.get(settings.api_key_header)
        try:
            record = api_keys.authenticate(secret)
        except Unauthenticated as exc:
            raise unauthorized(exc.message) from exc

        principal = IntegrationPrincipal(key_id=record.id, key_name=record.name)
        request.state.principal = principal
        subject_var.set(f"api_key:{record.id}")
        return principal

    dependency._policy = "api_key"
    return dependency
