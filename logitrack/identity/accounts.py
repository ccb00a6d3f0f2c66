"""
Name: Account Service (register / login)

Responsibilities:
  - Register users (password policy, unique email/username, role assignment)
  - Authenticate by email or username and issue session tokens

Collaborators:
  - domain.repositories.UserRepository: credential store
  - identity/passwords.py: Argon2 hashing and policy
  - identity/tokens.py: SessionTokenService

Constraints:
  - Login failures are one generic Unauthenticated ("Invalid credentials.")
  - Registration failures are ValidationError with a list of errors
"""

from dataclasses import dataclass
from typing import Optional

from ..domain.entities import UserIdentity
from ..domain.repositories import UserRepository
from ..exceptions import Conflict, Unauthenticated, ValidationError
from ..platform.logger import logger
from .passwords import hash_password, password_policy_errors, verify_password
from .roles import DEFAULT_ROLE
from .tokens import IssuedToken, SessionTokenService


@dataclass(frozen=True)
class AuthResult:
    user: UserIdentity
    token: IssuedToken

    @property
    def roles(self) -> list[str]:
        return sorted(self.user.roles)


class AccountService:
    def __init__(self, users: UserRepository, tokens: SessionTokenService):
        self._users = users
        self._tokens = tokens

    def register(
        self,
        *,
        email: str,
        password: str,
        username: Optional[str] = None,
        role: Optional[str] = None,
    ) -> AuthResult:
        normalized_email = (email or "").strip().lower()
        resolved_username = (username or "").strip() or normalized_email
        role_name = (role or "").strip() or DEFAULT_ROLE

        errors = []
        if "@" not in normalized_email:
            errors.append(
                {"code": "InvalidEmail", "description": "Email is invalid."}
            )
        errors.extend(password_policy_errors(password or ""))
        if normalized_email and self._users.get_by_email(normalized_email):
            errors.append(
                {
                    "code": "DuplicateEmail",
                    "description": f"Email '{normalized_email}' is already taken.",
                }
            )
        if self._users.get_by_username(resolved_username):
            errors.append(
                {
                    "code": "DuplicateUserName",
                    "description": f"Username '{resolved_username}' is already taken.",
                }
            )
        if errors:
            logger.info(
                "Registration rejected",
                extra={"email": normalized_email, "error_codes": [e["code"] for e in errors]},
            )
            raise ValidationError("Registration failed.", errors=errors)

        try:
            user = self._users.create_user(
                email=normalized_email,
                username=resolved_username,
                password_hash=hash_password(password),
            )
        except Conflict as exc:
            raise ValidationError(
                "Registration failed.",
                errors=[{"code": "Duplicate", "description": exc.message}],
            ) from exc

        self._users.ensure_role(role_name)
        user = self._users.add_to_role(user.id, role_name)

        logger.info(
            "User registered",
            extra={"user_id": user.id, "roles": sorted(user.roles)},
        )
        return AuthResult(user=user, token=self._tokens.issue(user))

    def login(self, email_or_username: str, password: str) -> AuthResult:
        """R: Email lookup first, then username."""
        identifier = (email_or_username or "").strip()
        user = None
        if identifier:
            user = self._users.get_by_email(identifier) or self._users.get_by_username(
                identifier
            )

        if user is None:
            logger.info("Login failed", extra={"reason": "unknown_identity"})
            raise Unauthenticated("Invalid credentials.")

        if not verify_password(password or "", user.password_hash):
            logger.info(
                "Login failed",
                extra={"reason": "wrong_password", "user_id": user.id},
            )
            raise Unauthenticated("Invalid credentials.")

        logger.info("User logged in", extra={"user_id": user.id})
        return AuthResult(user=user, token=self._tokens.issue(user))
