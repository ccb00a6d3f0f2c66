"""
Name: Default Users Seed
Description: Ensure the built-in roles and the default admin/user accounts
exist on startup when SEED_DEFAULT_USERS is enabled.
"""

from ..config import Settings
from ..domain.repositories import UserRepository
from ..identity.passwords import hash_password
from ..identity.roles import BUILTIN_ROLES, Role
from ..platform.logger import logger


def _ensure_user(
    users: UserRepository,
    *,
    username: str,
    email: str,
    password: str,
    role: str,
) -> None:
    existing = users.get_by_username(username) or users.get_by_email(email)
    if existing:
        logger.info("Seed: user already exists (skipping)", extra={"username": username})
        return

    user = users.create_user(
        email=email,
        username=username,
        password_hash=hash_password(password),
    )
    users.add_to_role(user.id, role)
    logger.info("Seed: created user", extra={"username": username, "role": role})


def seed_default_users(settings: Settings, users: UserRepository) -> None:
    """
    R: Create roles Admin/User plus the admin and user1 accounts if missing.

    Failures are logged and do not stop the application.
    """
    if not settings.seed_default_users:
        return

    if settings.is_production():
        logger.warning("Seed: SEED_DEFAULT_USERS ignored in production")
        return

    for role in BUILTIN_ROLES:
        users.ensure_role(role)

    accounts = (
        (settings.seed_admin_username, settings.seed_admin_email,
         settings.seed_admin_password, Role.ADMIN.value),
        (settings.seed_user_username, settings.seed_user_email,
         settings.seed_user_password, Role.USER.value),
    )
    for username, email, password, role in accounts:
        try:
            _ensure_user(
                users,
                username=username,
                email=email,
                password=password,
                role=role,
            )
        except Exception:
            logger.exception("Seed: failed to create user", extra={"username": username})
