"""
sha256.py - Pure-Python SHA-256 block hash.

Responsibilities:
- Pad a message to whole 512-bit blocks
- Run the SHA-256 compression function over every block
- Return the 32-byte digest

This is a from-scratch implementation used as the primitive of the
sha256iter-1 password scheme. It is bit-for-bit SHA-256 but makes no attempt
to be fast or side-channel resistant.
"""

from __future__ import annotations

import struct
from typing import List


MASK32 = 0xFFFFFFFF
DIGEST_SIZE = 32
BLOCK_SIZE = 64

# first 32 bits of the fractional parts of the square roots of the first 8 primes
SHA_H_INITIAL = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

# first 32 bits of the fractional parts of the cube roots of the first 64 primes
SHA_K_INITIAL = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5, 0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
    0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3, 0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
    0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC, 0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7, 0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
    0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13, 0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
    0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3, 0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5, 0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
    0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208, 0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & MASK32


def _pad(message: bytes) -> bytes:
    """Append 0x80, zero fill to 56 mod 64, then the 64-bit big-endian bit length."""
    bit_len = (len(message) * 8) & 0xFFFFFFFFFFFFFFFF
    padded = bytearray(message)
    padded.append(0x80)
    padded.extend(b"\x00" * ((56 - len(padded)) % BLOCK_SIZE))
    padded.extend(struct.pack(">Q", bit_len))
    assert len(padded) % BLOCK_SIZE == 0, "padding must produce whole 512-bit blocks"
    return bytes(padded)


def _compress(state: List[int], block: bytes) -> None:
    """Mix one 64-byte block into the eight running state words in place."""
    w = list(struct.unpack(">16I", block))

    # message schedule
    for i in range(16, 64):
        s0 = _rotr(w[i - 15], 7) ^ _rotr(w[i - 15], 18) ^ (w[i - 15] >> 3)
        s1 = _rotr(w[i - 2], 17) ^ _rotr(w[i - 2], 19) ^ (w[i - 2] >> 10)
        w.append((w[i - 16] + s0 + w[i - 7] + s1) & MASK32)

    a, b, c, d, e, f, g, h = state

    for i in range(64):
        S1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        temp1 = (h + S1 + ch + SHA_K_INITIAL[i] + w[i]) & MASK32
        S0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        temp2 = (S0 + maj) & MASK32

        h = g
        g = f
        f = e
        e = (d + temp1) & MASK32
        d = c
        c = b
        b = a
        a = (temp1 + temp2) & MASK32

    for i, v in enumerate((a, b, c, d, e, f, g, h)):
        state[i] = (state[i] + v) & MASK32


def sha256(message: bytes) -> bytes:
    """Return the 32-byte SHA-256 digest of ``message``."""
    padded = _pad(bytes(message))
    state = list(SHA_H_INITIAL)

    for offset in range(0, len(padded), BLOCK_SIZE):
        _compress(state, padded[offset:offset + BLOCK_SIZE])

    digest = struct.pack(">8I", *state)
    assert len(digest) == DIGEST_SIZE
    return digest


def hexdigest(message: bytes) -> str:
    return sha256(message).hex()
