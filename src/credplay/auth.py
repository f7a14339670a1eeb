"""
auth.py - Password hashing and verification.

Responsibilities:
- Generate salts from the OS random source
- Derive the sha256iter-1 digest (2**cost SHA-256 invocations)
- Produce encoded hashes for storage
- Verify a password against a stored hash, failing closed on bad data

sha256iter-1 is a plain sequential work factor with no memory-hardness. It is
kept for compatibility with existing stores. Argon2id hashes from argon2-cffi
are accepted alongside it.
"""

from __future__ import annotations

import hmac
import logging
import os
from typing import TYPE_CHECKING

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .encoding import HashFormatError, decode, encode
from .sha256 import sha256

if TYPE_CHECKING:
    from .store import CredentialStore


logger = logging.getLogger(__name__)

HASH_VERSION = "sha256iter-1"
ARGON2_PREFIX = "$argon2"

DEF_SALT_LEN = 16
DEF_HASH_COST = 12
# 2**63 iterations is the most an unsigned 64-bit counter can hold
MAX_COST = 63

# memory_cost is in KiB, time_cost is iterations.
PH = PasswordHasher(
    time_cost=2,
    memory_cost=102400,  # about 100 MiB
    parallelism=8,
    hash_len=32,
    salt_len=DEF_SALT_LEN,
)


def _check_cost(cost: int) -> None:
    if isinstance(cost, bool) or not isinstance(cost, int):
        raise ValueError(f"cost must be an int, got {type(cost).__name__}")
    if not 0 <= cost <= MAX_COST:
        raise ValueError(f"cost must be between 0 and {MAX_COST}, got {cost}")


def get_salt(num_bytes: int = DEF_SALT_LEN) -> bytes:
    """Return ``num_bytes`` from the OS CSPRNG. There is no fallback source."""
    if isinstance(num_bytes, bool) or not isinstance(num_bytes, int) or num_bytes <= 0:
        raise ValueError(f"salt length must be a positive int, got {num_bytes!r}")
    return os.urandom(num_bytes)


def derive(password: str, salt: bytes, cost: int) -> bytes:
    """
    Hash password||salt once, then re-hash the digest 2**cost - 1 more times.
    Cost 0 is a single SHA-256 call.
    """
    _check_cost(cost)
    digest = sha256(password.encode("utf-8") + bytes(salt))
    for _ in range((1 << cost) - 1):
        digest = sha256(digest)
    return digest


def hash_password(password: str, salt: bytes, cost: int = DEF_HASH_COST) -> str:
    """Return the sha256iter-1 encoded hash string for storage."""
    digest = derive(password, salt, cost)
    return encode(HASH_VERSION, cost, salt, digest)


def hash_secret_argon2(secret: str) -> str:
    """Return an Argon2id encoded hash string (includes salt + parameters)."""
    return PH.hash(secret)


def _verify_argon2(stored_hash: str, secret: str) -> bool:
    # argon2-cffi encodes the hash as ASCII and raises on anything else
    if not stored_hash.isascii():
        logger.warning("Rejecting argon2 hash with non-ASCII characters")
        return False
    try:
        return PH.verify(stored_hash, secret)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError) as e:
        logger.warning("Rejecting malformed argon2 hash: %s", e)
        return False


def verify_secret(stored_hash: str, secret: str) -> bool:
    """
    Check ``secret`` against an encoded hash.
    Unknown tags and malformed strings return False instead of raising.
    """
    try:
        secret.encode("utf-8")
    except UnicodeEncodeError:
        logger.warning("Rejecting secret that cannot be encoded as UTF-8")
        return False

    if stored_hash.startswith(ARGON2_PREFIX):
        return _verify_argon2(stored_hash, secret)

    try:
        parsed = decode(stored_hash)
    except HashFormatError as e:
        logger.warning("Rejecting malformed stored hash: %s", e)
        return False

    if parsed.tag != HASH_VERSION:
        logger.warning("Rejecting unsupported hash scheme %r", parsed.tag)
        return False
    if parsed.cost > MAX_COST:
        logger.warning("Rejecting stored hash with cost %d above %d", parsed.cost, MAX_COST)
        return False

    candidate = derive(secret, parsed.salt, parsed.cost)
    return hmac.compare_digest(candidate, parsed.digest)


def authenticate(store: "CredentialStore", username: str, password: str) -> bool:
    """True iff ``username`` exists and ``password`` matches its stored hash."""
    stored_hash = store.get(username)
    if stored_hash is None:
        logger.debug("Authentication for unknown user %r", username)
        return False
    ok = verify_secret(stored_hash, password)
    logger.debug("Authentication for %r: %s", username, "ok" if ok else "failed")
    return ok
