"""Small builders shared by the test modules."""

from logitrack.domain.entities import UserIdentity

TEST_SECRET = "test-signing-secret-with-at-least-32-bytes"


def make_identity(*roles: str, email: str = "someone@example.com") -> UserIdentity:
    return UserIdentity(
        id=f"user-{email}",
        email=email,
        username=email.split("@")[0],
        password_hash="unused",
        roles=frozenset(roles),
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
