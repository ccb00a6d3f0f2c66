"""
Name: Password Hashing

Responsibilities:
  - Hash and verify passwords using Argon2
  - Enforce the registration password policy
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

MIN_PASSWORD_LENGTH = 6

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """R: Hash a password using Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """R: Verify password against stored hash."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def password_policy_errors(password: str) -> list[dict[str, str]]:
    """R: Policy violations (length, digit); empty list when acceptable."""
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            {
                "code": "PasswordTooShort",
                "description": f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.",
            }
        )
    if not any(ch.isdigit() for ch in password):
        errors.append(
            {
                "code": "PasswordRequiresDigit",
                "description": "Passwords must have at least one digit ('0'-'9').",
            }
        )
    return errors
