"""
Password hashing helpers.

Passwords are stored as salted bcrypt hashes; the salt is embedded in the
hash string, so only the hash is persisted.
"""

import bcrypt

from brainwave.config import get_settings

settings = get_settings()


def hash_password(password: str) -> str:
    """
    Hash a password with a fresh salt.

    Args:
        password: Plain text password

    Returns:
        bcrypt hash as a UTF-8 string
    """
    salt = bcrypt.gensalt(rounds=settings.security.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """
    Compare a plain text password against a stored hash.

    Args:
        password: Plain text password to check
        password_hash: Stored bcrypt hash

    Returns:
        True if the password matches
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
