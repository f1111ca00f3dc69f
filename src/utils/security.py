"""
Password hashing and token helpers.

Passwords are stored as base64 text of PBKDF2-HMAC-SHA256(password, salt),
the salt being 16 random bytes generated once per password.
"""

import base64
import binascii
import hashlib
import hmac
import secrets

from utils import config
from utils.errors import HashingUnavailable
from utils.logger import get_logger

_logger = get_logger(__name__)

SALT_LENGTH = 16
HASH_ALGORITHM = "sha256"
HASH_LENGTH = 32  # digest size of sha256


def ensure_hashing_available() -> None:
    """Raise HashingUnavailable when the hash primitive is missing."""
    if HASH_ALGORITHM not in hashlib.algorithms_available:
        _logger.critical(f"Hashing algorithm {HASH_ALGORITHM} not available")
        raise HashingUnavailable(f"{HASH_ALGORITHM} is not available")


# refuse to import without it, login would be impossible anyway
ensure_hashing_available()


def generate_salt() -> bytes:
    return secrets.token_bytes(SALT_LENGTH)


def generate_salt_string() -> str:
    return base64.b64encode(generate_salt()).decode("ascii")


def hash_password(password: str, salt: bytes) -> bytes:
    """
    Digest of the utf-8 password under the given salt.
    Deterministic for the same (password, salt, iteration count).
    """
    if password is None or salt is None:
        raise ValueError("password and salt are required")
    return hashlib.pbkdf2_hmac(
        HASH_ALGORITHM, password.encode("utf-8"), salt, config.HASH_ITERATIONS
    )


def hash_password_string(password: str, salt_string: str) -> str:
    salt = base64.b64decode(salt_string, validate=True)
    return base64.b64encode(hash_password(password, salt)).decode("ascii")


def verify_password(password: str, stored_hash: bytes, stored_salt: bytes) -> bool:
    # a wrong-length hash can never match; skip the expensive digest
    if len(stored_hash) != HASH_LENGTH:
        return False
    return hmac.compare_digest(hash_password(password, stored_salt), stored_hash)


def verify_password_string(
    password: str, stored_hash_string: str, stored_salt_string: str
) -> bool:
    try:
        stored_hash = base64.b64decode(stored_hash_string, validate=True)
        stored_salt = base64.b64decode(stored_salt_string, validate=True)
    except (binascii.Error, ValueError, TypeError):
        _logger.warning("Stored credentials are not valid base64.")
        return False
    return verify_password(password, stored_hash, stored_salt)


def generate_token(length: int = 32) -> str:
    """URL-safe random token without padding, from `length` random bytes."""
    return secrets.token_urlsafe(length)

