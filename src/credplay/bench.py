"""
bench.py - Benchmark the password hash work factor.

Responsibilities:
- Measure derive() time per cost (should roughly double per step)
- Compare the pure-Python SHA-256 against the native one from `cryptography`
- Return results in structured dicts for printing/reporting
"""

from __future__ import annotations

import statistics
import time
from typing import Any, Callable, Dict, Iterable, List

from cryptography.hazmat.primitives import hashes

from . import auth
from .sha256 import sha256


def _median_ms(fn: Callable[[], object], rounds: int) -> float:
    if rounds <= 0:
        raise ValueError("rounds must be positive")
    samples = []
    for _ in range(rounds):
        started = time.perf_counter()
        fn()
        samples.append((time.perf_counter() - started) * 1000.0)
    return float(statistics.median(samples))


def native_sha256(data: bytes) -> bytes:
    h = hashes.Hash(hashes.SHA256())
    h.update(data)
    return h.finalize()


def bench_derive(costs: Iterable[int], rounds: int = 5, password: str = "bench") -> List[Dict[str, Any]]:
    """Median derive() time for each cost, using one fixed salt."""
    salt = auth.get_salt()
    results: List[Dict[str, Any]] = []
    for cost in costs:
        ms = _median_ms(lambda: auth.derive(password, salt, cost), rounds)
        results.append({"cost": cost, "invocations": 1 << cost, "derive_median_ms": ms, "rounds": rounds})
    return results


def bench_primitive(size: int = 1024, rounds: int = 20) -> Dict[str, Any]:
    """
    Time one SHA-256 over ``size`` bytes, pure Python vs native.
    Also reports whether both produced the same digest.
    """
    payload = b"A" * size
    return {
        "size_bytes": size,
        "python_median_ms": _median_ms(lambda: sha256(payload), rounds),
        "native_median_ms": _median_ms(lambda: native_sha256(payload), rounds),
        "digests_match": sha256(payload) == native_sha256(payload),
        "rounds": rounds,
    }
