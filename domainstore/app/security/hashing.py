# domainstore/app/security/hashing.py
"""
Password hashing (bcrypt through passlib).

The cost factor is process-wide and set once at startup with
``configure_hashing``.
"""
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class HashingError(Exception):
    """The hashing primitive could not produce a digest."""


def configure_hashing(rounds: int) -> None:
    pwd_context.update(bcrypt__rounds=rounds)


def get_password_hash(password: str) -> str:
    """
    Hash a password for storage.

    Raises:
        HashingError: if the password is missing or the primitive fails
    """
    if password is None:
        raise HashingError("password is required")
    try:
        return pwd_context.hash(password)
    except (TypeError, ValueError) as exc:
        raise HashingError(str(exc)) from exc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if the password matches; mismatches and bad digests return False."""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (TypeError, ValueError):
        return False


def dummy_verify() -> bool:
    """Spend one verification's worth of time when there is no digest to check."""
    return pwd_context.dummy_verify()
