"""
zkverify.tests helpers

Shared fixtures-by-function for the zkverify test-suite.

Exports:
- configure_test_logging() -> None
- env_flag(name, default=False) -> bool
- Circuit, make_circuit(num_inputs, seed) -> Circuit   (cached)
- prepared(num_inputs, seed) -> tuple[bytes, ...]      (cached)
- make_proof(circuit, inputs, a, b) -> Proof
- scalars_to_bytes(values) -> bytes

Genuine proofs
--------------
There is no prover here. `make_circuit` builds a verifying key from a known
trapdoor (alpha, beta, gamma, delta and the discrete logs s_i of the input
commitment bases), which lets `make_proof` pick A = a·G1, B = b·G2 and solve

    c = (a·b - alpha·beta - gamma·(s_0 + Σ x_i·s_{i+1})) / delta   (mod r)

so that C = c·G1 satisfies the Groth16 equation exactly as an honest proof
would.

Environment toggles:
- ZKVERIFY_TEST_LOG=1     → DEBUG logging for zkverify.*
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence, Tuple

from zkverify.curves import get_backend
from zkverify.keys import VerifyingKey, encode_verifying_key, make_verifying_key
from zkverify.proof import Proof, encode_proof

BN254 = get_backend("bn254")
R = BN254.scalar_modulus


def env_flag(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def configure_test_logging(level: int = logging.DEBUG) -> None:
    """Route zkverify.* logs to stderr when ZKVERIFY_TEST_LOG is set."""
    if env_flag("ZKVERIFY_TEST_LOG", False):
        from zkverify import logging as zlog

        zlog.configure(json=False, level=level)


@dataclass(frozen=True)
class Circuit:
    alpha: int
    beta: int
    gamma: int
    delta: int
    ic: Tuple[int, ...]
    vk: VerifyingKey
    vk_bytes: bytes

    @property
    def num_inputs(self) -> int:
        return len(self.ic) - 1


def _scalar(seed: int, label: int) -> int:
    # Deterministic, nonzero, spread over the field.
    v = pow(7, 1000 + 97 * seed + label, R)
    return v or 1


@lru_cache(maxsize=None)
def make_circuit(num_inputs: int = 2, seed: int = 1) -> Circuit:
    be = BN254
    alpha, beta, gamma, delta = (_scalar(seed, i) for i in range(4))
    ic = tuple(_scalar(seed, 10 + i) for i in range(num_inputs + 1))
    vk = make_verifying_key(
        be.g1_mul(be.g1_generator(), alpha),
        be.g2_mul(be.g2_generator(), beta),
        be.g2_mul(be.g2_generator(), gamma),
        be.g2_mul(be.g2_generator(), delta),
        [be.g1_mul(be.g1_generator(), s) for s in ic],
    )
    return Circuit(alpha, beta, gamma, delta, ic, vk, encode_verifying_key(vk))


@lru_cache(maxsize=None)
def prepared(num_inputs: int = 2, seed: int = 1) -> Tuple[bytes, ...]:
    """The four prepared-key buffers of make_circuit(num_inputs, seed)."""
    from zkverify.api import prepare_pvk_bytes

    return tuple(prepare_pvk_bytes(make_circuit(num_inputs, seed).vk_bytes))


def make_proof(circuit: Circuit, inputs: Sequence[int], a: int = 11, b: int = 13) -> Proof:
    be = BN254
    ic_s = circuit.ic[0] + sum(x * s for x, s in zip(inputs, circuit.ic[1:]))
    num = (a * b - circuit.alpha * circuit.beta - circuit.gamma * ic_s) % R
    c = num * pow(circuit.delta, R - 2, R) % R
    return Proof(
        a=be.g1_mul(be.g1_generator(), a),
        b=be.g2_mul(be.g2_generator(), b),
        c=be.g1_mul(be.g1_generator(), c),
    )


def proof_bytes(circuit: Circuit, inputs: Sequence[int], a: int = 11, b: int = 13) -> bytes:
    return encode_proof(make_proof(circuit, inputs, a, b))


def scalars_to_bytes(values: Sequence[int]) -> bytes:
    return b"".join(int(v).to_bytes(32, "little") for v in values)


def non_residue_x_g1() -> int:
    """Smallest x with no G1 point above it."""
    x = 0
    while BN254.g1_y_from_x(x) is not None:
        x += 1
    return x


def off_subgroup_x_g2() -> Tuple[int, int]:
    """An x on the G2 twist whose points lie outside the order-r subgroup."""
    for k in range(1, 256):
        x = (k, 1)
        y = BN254.g2_y_from_x(x)
        if y is None:
            continue
        if not BN254.g2_in_subgroup(BN254.g2_from_affine(x, y)):
            return x
    raise AssertionError("no off-subgroup twist point found")


configure_test_logging()

__all__ = [
    "BN254",
    "R",
    "Circuit",
    "make_circuit",
    "prepared",
    "make_proof",
    "proof_bytes",
    "scalars_to_bytes",
    "non_residue_x_g1",
    "off_subgroup_x_g2",
    "env_flag",
    "configure_test_logging",
]
