"""
zkverify.bench — verification micro-bench with JSON output

Times `verify_groth16_in_bytes` (decode of the prepared key, the proof and the
inputs plus the pairing check) and `verify_with_prepared_key` (pairing check
only, key already in memory) over a fixed proof, and reports timing stats.

Driven by the `zkverify bench` subcommand.
"""

from __future__ import annotations

import hashlib
import os
import platform
import statistics
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Sequence

from zkverify.api import SCALAR_SIZE, verify_groth16_in_bytes, verify_with_prepared_key
from zkverify.codec import Codec
from zkverify.keys import PreparedVerifyingKey
from zkverify.proof import decode_proof


def _quantile(sorted_vals: List[float], q: float) -> float:
    """Nearest-rank quantile (q in 0..1)."""
    if not sorted_vals:
        return 0.0
    n = len(sorted_vals)
    idx = max(0, min(n - 1, int(q * (n - 1) + 0.5)))
    return sorted_vals[idx]


@dataclass
class BenchStats:
    iters: int
    ok_count: int
    mean_s: float
    median_s: float
    p90_s: float
    p95_s: float
    p99_s: float
    min_s: float
    max_s: float
    stdev_s: float

    @classmethod
    def from_samples(cls, samples: List[float], oks: List[bool]) -> "BenchStats":
        iters = len(samples)
        ok_count = sum(1 for x in oks if x)
        if iters == 0:
            return cls(0, 0, 0, 0, 0, 0, 0, 0, 0, 0)
        s = sorted(samples)
        return cls(
            iters=iters,
            ok_count=ok_count,
            mean_s=sum(samples) / iters,
            median_s=statistics.median(s),
            p90_s=_quantile(s, 0.90),
            p95_s=_quantile(s, 0.95),
            p99_s=_quantile(s, 0.99),
            min_s=s[0],
            max_s=s[-1],
            stdev_s=statistics.pstdev(samples) if iters > 1 else 0.0,
        )


def _time(fn: Callable[[], bool], iters: int, warmup: int) -> BenchStats:
    for _ in range(max(0, warmup)):
        fn()
    times: List[float] = []
    oks: List[bool] = []
    for _ in range(max(0, iters)):
        t0 = time.perf_counter()
        ok = fn()
        times.append(time.perf_counter() - t0)
        oks.append(bool(ok))
    return BenchStats.from_samples(times, oks)


def _env_meta() -> Dict[str, Any]:
    return {
        "python": sys.version.split()[0],
        "python_impl": platform.python_implementation(),
        "platform": platform.platform(),
        "machine": platform.machine(),
        "cpu_count": os.cpu_count(),
        "time": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    }


def run_bench(
    buffers: Sequence[bytes],
    inputs: bytes,
    proof: bytes,
    *,
    curve: str = "bn254",
    iters: int = 10,
    warmup: int = 1,
) -> Dict[str, Any]:
    """Bench both call shapes; raises ZKVerifyError on malformed input."""
    pvk = PreparedVerifyingKey.deserialize(*buffers, curve=curve)
    decoded_inputs = Codec(pvk.backend).decode_scalar_sequence(inputs, SCALAR_SIZE)
    decoded_proof = decode_proof(proof, curve=curve)

    in_bytes = _time(
        lambda: verify_groth16_in_bytes(*buffers, inputs, proof, curve=curve), iters, warmup
    )
    prepared = _time(
        lambda: verify_with_prepared_key(pvk, decoded_inputs, decoded_proof), iters, warmup
    )
    return {
        "meta": {**_env_meta(), "curve": pvk.curve, "iters": iters, "warmup": warmup},
        "num_public_inputs": len(decoded_inputs),
        "hashes": {"proof_sha3_256": hashlib.sha3_256(proof).hexdigest()},
        "results": {
            "verify_groth16_in_bytes": asdict(in_bytes),
            "verify_with_prepared_key": asdict(prepared),
        },
    }


__all__ = ["BenchStats", "run_bench"]
