"""
Name: Session Token Service (JWT)

Responsibilities:
  - Issue signed HS256 session tokens carrying subject, name, email, roles
  - Validate signature, issuer, audience and expiry (with clock skew)
  - Classify failures for logging while exposing a single 401 outcome

Collaborators:
  - config.py: jwt_* settings
  - identity/access.py: validates bearer tokens per request
  - identity/accounts.py: issues tokens on register/login

Constraints:
  - Stateless: no server-side session store, no revocation before expiry
  - Empty signing secret is a ConfigurationError raised at construction
  - Never log the token or the secret
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from ..domain.entities import UserIdentity
from ..exceptions import (
    AuthError,
    ConfigurationError,
    Expired,
    InvalidSignature,
    Malformed,
    WrongAudience,
    WrongIssuer,
)
from ..platform.logger import logger

JWT_ALGORITHM = "HS256"

CLAIM_NAME = "unique_name"
CLAIM_EMAIL = "email"
CLAIM_ROLES = "roles"


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    issuer: str
    audience: str
    expires_minutes: int
    clock_skew_seconds: int = 30

    @classmethod
    def from_settings(cls, settings) -> "TokenSettings":
        return cls(
            secret=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            expires_minutes=settings.jwt_expires_minutes,
            clock_skew_seconds=settings.jwt_clock_skew_seconds,
        )


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_in: int
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    """R: Validated claim set of a session token."""

    subject: str
    name: str
    email: str
    roles: tuple[str, ...]
    issued_at: datetime
    expires_at: datetime
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    def has_any_role(self, roles) -> bool:
        return bool(set(roles) & set(self.roles))

    def as_claim_list(self) -> list[dict[str, str]]:
        """R: Flattened {type, value} pairs, one entry per role."""
        claims = []
        for claim_type, value in self.raw.items():
            if isinstance(value, (list, tuple)):
                claims.extend({"type": claim_type, "value": str(v)} for v in value)
            else:
                claims.append({"type": claim_type, "value": str(value)})
        return claims


class SessionTokenService:
    """
    R: Builds and verifies session credentials.

    Methods:
        issue: sign a token for a resolved identity
        validate: verify a token and return its claims
    """

    def __init__(self, settings: TokenSettings):
        if not settings.secret or not settings.secret.strip():
            raise ConfigurationError("JWT signing secret is not configured.")
        if settings.expires_minutes < 0:
            raise ConfigurationError("JWT expiry must be >= 0 minutes.")
        self._settings = settings

    @property
    def expires_in_seconds(self) -> int:
        return self._settings.expires_minutes * 60

    def issue(self, identity: UserIdentity) -> IssuedToken:
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(minutes=self._settings.expires_minutes)
        payload = {
            "sub": identity.id,
            CLAIM_NAME: identity.display_name,
            CLAIM_EMAIL: identity.email,
            CLAIM_ROLES: sorted(identity.roles),
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._settings.secret, algorithm=JWT_ALGORITHM)
        return IssuedToken(
            token=token,
            expires_in=self.expires_in_seconds,
            expires_at=expires_at,
        )

    def validate(self, token: str) -> TokenClaims:
        """
        R: Decode and verify a token.

        Raises:
            InvalidSignature, Expired, WrongAudience, WrongIssuer, Malformed
            (all AuthError, i.e. Unauthenticated)
        """
        try:
            payload = self._decode(token)
            return self._to_claims(payload)
        except AuthError as exc:
            logger.info(
                "Session token rejected",
                extra={"reason": exc.kind},
            )
            raise

    def _decode(self, token: str) -> dict[str, Any]:
        if not token:
            raise Malformed("Empty token.")
        try:
            return jwt.decode(
                token,
                self._settings.secret,
                algorithms=[JWT_ALGORITHM],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                leeway=self._settings.clock_skew_seconds,
                options={"require": ["exp", "iat", "sub", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Expired("Token expired.") from exc
        except jwt.InvalidAudienceError as exc:
            raise WrongAudience("Token audience mismatch.") from exc
        except jwt.InvalidIssuerError as exc:
            raise WrongIssuer("Token issuer mismatch.") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature("Token signature mismatch.") from exc
        except jwt.InvalidTokenError as exc:
            raise Malformed("Token is malformed.") from exc

    @staticmethod
    def _to_claims(payload: dict[str, Any]) -> TokenClaims:
        subject = payload.get("sub")
        email = payload.get(CLAIM_EMAIL)
        roles = payload.get(CLAIM_ROLES, [])
        if not subject or not email or not isinstance(roles, list):
            raise Malformed("Token is missing required claims.")

        return TokenClaims(
            subject=str(subject),
            name=str(payload.get(CLAIM_NAME) or email),
            email=str(email),
            roles=tuple(str(role) for role in roles),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            raw=dict(payload),
        )
