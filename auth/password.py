"""
Password hashing and verification.

Uses scrypt from the ``cryptography`` library. Stored format is
``<hex-salt>:<hex-derived-key>`` with a 16-byte salt and a 32-byte key.
The hex salt text itself is the KDF salt, so hashes written by the
previous Node server keep verifying.
"""

from __future__ import annotations

import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SALT_BYTES = 16
KEY_LENGTH = 32

DEFAULT_N = 16384
DEFAULT_R = 8
DEFAULT_P = 1


def _kdf(salt: str, n: int, r: int, p: int) -> Scrypt:
    return Scrypt(salt=salt.encode(), length=KEY_LENGTH, n=n, r=r, p=p)


def hash_password(
    password: str,
    *,
    n: int = DEFAULT_N,
    r: int = DEFAULT_R,
    p: int = DEFAULT_P,
) -> str:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_hex(SALT_BYTES)
    derived = _kdf(salt, n, r, p).derive(password.encode())
    return f"{salt}:{derived.hex()}"


def verify_password(
    password: str,
    stored: str,
    *,
    n: int = DEFAULT_N,
    r: int = DEFAULT_R,
    p: int = DEFAULT_P,
) -> bool:
    """
    Constant-time check of ``password`` against a stored hash.

    Malformed stored values verify as ``False``.
    """
    if not isinstance(password, str) or not isinstance(stored, str):
        return False
    salt, sep, key_hex = stored.partition(":")
    if not sep or not salt or len(key_hex) != KEY_LENGTH * 2:
        return False
    try:
        expected = bytes.fromhex(key_hex)
        _kdf(salt, n, r, p).verify(password.encode(), expected)
    except (InvalidKey, ValueError):
        return False
    return True


def random_password() -> str:
    """Throwaway password for accounts that only sign in through a provider."""
    return secrets.token_hex(16)
