"""
zkverify.pairing
================

The Groth16 verification equation against a prepared key.

Equation
--------
    e(A, B) · e(IC, -gamma) · e(C, -delta) == e(alpha, beta)

where the input commitment is

    IC = gamma_abc[0] + Σ inputs[i] · gamma_abc[i+1]

`-gamma`, `-delta` are already in prepared form inside the key; only B is
prepared per proof. The three pairings share one Miller loop and one final
exponentiation (`CurveBackend.multi_pairing`). The right hand side was
computed once when the key was prepared.

A proof that does not satisfy the equation yields False. Exceptions are
reserved for structural problems (wrong input count).
"""

from __future__ import annotations

from typing import Sequence

from zkverify.curves.base import CurveBackend, G1Point
from zkverify.errors import PublicInputCountMismatch
from zkverify.keys import PreparedVerifyingKey
from zkverify.logging import get_logger
from zkverify.proof import Proof

log = get_logger(__name__)


def compute_input_commitment(
    backend: CurveBackend,
    gamma_abc_g1: Sequence[G1Point],
    inputs: Sequence[int],
) -> G1Point:
    if len(inputs) + 1 != len(gamma_abc_g1):
        raise PublicInputCountMismatch(expected=len(gamma_abc_g1) - 1, actual=len(inputs))
    return backend.g1_add(gamma_abc_g1[0], backend.g1_msm(gamma_abc_g1[1:], inputs))


def verify_proof(pvk: PreparedVerifyingKey, inputs: Sequence[int], proof: Proof) -> bool:
    be = pvk.backend
    ic = compute_input_commitment(be, pvk.vk_gamma_abc_g1, inputs)
    product = be.multi_pairing(
        [
            (proof.a, be.prepare_g2(proof.b)),
            (ic, pvk.gamma_g2_neg_pc),
            (proof.c, pvk.delta_g2_neg_pc),
        ]
    )
    ok = be.gt_eq(product, pvk.alpha_g1_beta_g2)
    log.debug("pairing check", extra={"num_inputs": len(inputs), "ok": ok})
    return ok


__all__ = ["compute_input_commitment", "verify_proof"]
