"""
Credential Vault - Salted one-way hashing of passwords and secret answers.

Both credentials use the same derivation: PBKDF2-HMAC-SHA512 with a
per-credential random salt, PBKDF2_ITERATIONS rounds and a 64-byte digest,
computed through passlib's pbkdf2_sha512 handler. The salt is kept in its
own column (hex) so a password reset can rehash with the original salt.

Plaintext secrets are never stored or logged.
"""

import secrets
from typing import Optional

from passlib.hash import pbkdf2_sha512
from passlib.utils import consteq

from classboard.config import PBKDF2_ITERATIONS, SALT_BYTES


def new_salt() -> str:
    """Fresh random salt as a hex string."""
    return secrets.token_hex(SALT_BYTES)


def hash_secret(secret: str, salt: str, rounds: Optional[int] = None) -> str:
    """
    Derive the digest of a secret with the given salt.

    Args:
        secret: Plaintext password or secret answer
        salt: Hex salt from new_salt()
        rounds: Iteration override (defaults to PBKDF2_ITERATIONS)

    Returns:
        passlib modular-crypt string ($pbkdf2-sha512$rounds$salt$checksum)
    """
    handler = pbkdf2_sha512.using(
        salt=bytes.fromhex(salt),
        rounds=rounds or PBKDF2_ITERATIONS,
    )
    return handler.hash(secret)


def verify_secret(secret: str, digest: str, salt: str) -> bool:
    """
    Recompute the digest for `secret` and compare it in constant time.

    The round count is taken from the stored digest so records written
    with a different PBKDF2_ITERATIONS setting keep verifying.
    """
    if not secret or not digest or not salt:
        return False
    stored = pbkdf2_sha512.from_string(digest)
    candidate = hash_secret(secret, salt, rounds=stored.rounds)
    return consteq(candidate, digest)
