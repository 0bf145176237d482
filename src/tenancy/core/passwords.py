"""Password hashing for seeded accounts."""

from passlib.context import CryptContext

DEFAULT_ROUNDS = 12

password_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=DEFAULT_ROUNDS,
)


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Hash a password with bcrypt; rounds overrides the default work factor."""
    if rounds is None:
        return password_context.hash(password)
    return password_context.copy(bcrypt__rounds=rounds).hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Check password against a stored hash; unrecognized hashes never match."""
    try:
        return password_context.verify(password, hashed_password)
    except ValueError:
        return False
