"""
encoding.py - Self-describing text form of a password hash.

Format: ``$<tag>$<cost>$<salt-b64>$<digest-b64>$``

The tag names the scheme version so several formats can live in one store.
This module only checks structure; deciding which tags are acceptable is up to
the caller (see auth.verify_secret).
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass


DELIM = "$"


class HashFormatError(ValueError):
    """Raised when an encoded hash string is not well formed."""


@dataclass(frozen=True)
class EncodedHash:
    tag: str
    cost: int
    salt: bytes
    digest: bytes


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(field: str, name: str) -> bytes:
    try:
        return base64.b64decode(field.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise HashFormatError(f"{name} is not valid base64") from e


def encode(tag: str, cost: int, salt: bytes, digest: bytes) -> str:
    """Serialize the four fields, framed by the delimiter at both ends."""
    if not tag or DELIM in tag:
        raise ValueError(f"invalid tag: {tag!r}")
    if cost < 0:
        raise ValueError("cost must be non-negative")
    fields = [tag, str(cost), _b64encode(salt), _b64encode(digest)]
    return DELIM + DELIM.join(fields) + DELIM


def decode(text: str) -> EncodedHash:
    """
    Parse an encoded hash back into its fields.
    Raises HashFormatError on wrong framing, field count, cost or base64.
    """
    parts = text.split(DELIM)
    if len(parts) != 6 or parts[0] != "" or parts[-1] != "":
        raise HashFormatError(f"expected 4 delimited fields, got {max(len(parts) - 2, 0)}")

    tag, cost_s, salt_b64, digest_b64 = parts[1:5]
    if not tag:
        raise HashFormatError("empty algorithm tag")
    # str.isdigit() also accepts non-ASCII digits
    if not cost_s or not (cost_s.isascii() and cost_s.isdigit()):
        raise HashFormatError(f"cost is not a non-negative integer: {cost_s!r}")

    return EncodedHash(
        tag=tag,
        cost=int(cost_s),
        salt=_b64decode(salt_b64, "salt"),
        digest=_b64decode(digest_b64, "digest"),
    )
