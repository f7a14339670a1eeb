"""
attack.py - Offline brute-force demonstration.

Tries every numeric PIN of a given length against one stored hash, the way an
attacker holding a copy of the credential file would. With sha256iter-1 the
only thing slowing this down is 2**cost SHA-256 calls per guess.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

from . import auth
from .encoding import decode


def describe_target(stored_hash: str) -> Dict[str, Any]:
    """
    Report the scheme and work factor of a stored hash.
    Raises ValueError for hashes verify_secret would never accept.
    """
    if stored_hash.startswith(auth.ARGON2_PREFIX):
        return {"scheme": stored_hash.split("$")[1], "cost": None, "sha256_per_guess": None}

    parsed = decode(stored_hash)
    if parsed.tag != auth.HASH_VERSION:
        raise ValueError(f"unsupported hash scheme {parsed.tag!r}")
    if parsed.cost > auth.MAX_COST:
        raise ValueError(f"cost {parsed.cost} above {auth.MAX_COST}")
    return {"scheme": parsed.tag, "cost": parsed.cost, "sha256_per_guess": 1 << parsed.cost}


def bruteforce_pin_hash(stored_hash: str, digits: int = 4) -> Tuple[Optional[str], float, int]:
    """
    Try PINs 0..10**digits-1, zero padded, until one verifies.
    Returns (pin or None, elapsed seconds, attempts made).
    """
    if digits <= 0:
        raise ValueError("digits must be positive")
    describe_target(stored_hash)

    start = time.perf_counter()
    for attempts, pin in enumerate((str(i).zfill(digits) for i in range(10**digits)), start=1):
        if auth.verify_secret(stored_hash, pin):
            return pin, time.perf_counter() - start, attempts
    return None, time.perf_counter() - start, 10**digits
