"""Password hashing: bcrypt through passlib."""

from passlib.context import CryptContext

from card_platform.core.exceptions import HashingException

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except (ValueError, TypeError, RuntimeError) as exc:
        raise HashingException("Failed to hash password") from exc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return whether the password matches. Raises HashingException for a malformed digest."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as exc:
        raise HashingException("Stored password hash is malformed") from exc
