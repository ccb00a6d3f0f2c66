"""
Name: Role Names

Responsibilities:
  - Name the built-in roles; other role names are created on demand
"""

from enum import Enum


class Role(str, Enum):
    """R: Built-in roles seeded at startup."""

    ADMIN = "Admin"
    USER = "User"


DEFAULT_ROLE = Role.USER.value
BUILTIN_ROLES = tuple(role.value for role in Role)
