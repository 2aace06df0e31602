"""
zkverify.api
============

Byte-level entry points.

    prepare_pvk_bytes(vk_bytes) -> [vk_gamma_abc_g1, alpha_g1_beta_g2,
                                    gamma_g2_neg_pc, delta_g2_neg_pc]

    verify_groth16_in_bytes(<4 buffers>, public_inputs_bytes, proof_bytes) -> bool
    verify_groth16(<4 buffers>, public_inputs: Sequence[int], proof_bytes) -> bool
    verify_with_prepared_key(pvk, public_inputs, proof) -> bool

All functions are pure and synchronous. Malformed input raises a
`ZKVerifyError` subclass; a well-formed proof that does not verify returns
False.
"""

from __future__ import annotations

from typing import List, Sequence, Union

from zkverify.codec import Codec
from zkverify.curves import CurveId, get_backend
from zkverify.errors import InvalidEncoding, ZKVerifyError
from zkverify.keys import PreparedVerifyingKey, decode_verifying_key, prepare_verifying_key
from zkverify.logging import get_logger
from zkverify.pairing import verify_proof
from zkverify.proof import Proof, decode_proof

log = get_logger(__name__)

SCALAR_SIZE = 32

CurveLike = Union[str, CurveId]


def prepare_pvk_bytes(vk_bytes: bytes, *, curve: CurveLike = CurveId.BN254) -> List[bytes]:
    """Decode a compressed verifying key and return its four prepared buffers."""
    try:
        vk = decode_verifying_key(vk_bytes, curve=curve)
    except ZKVerifyError as e:
        log.debug("rejected verifying key", extra={"code": e.code})
        raise
    return prepare_verifying_key(vk, curve=curve).as_serialized()


def verify_groth16_in_bytes(
    vk_gamma_abc_g1_bytes: bytes,
    alpha_g1_beta_g2_bytes: bytes,
    gamma_g2_neg_pc_bytes: bytes,
    delta_g2_neg_pc_bytes: bytes,
    proof_public_inputs_as_bytes: bytes,
    proof_points_as_bytes: bytes,
    *,
    curve: CurveLike = CurveId.BN254,
) -> bool:
    """
    Verify with public inputs given as concatenated 32-byte little-endian
    scalars. A length that is not a multiple of 32 raises
    `InputLengthWrong(32)`; a scalar >= r raises `InvalidEncoding`.
    """
    codec = Codec(get_backend(curve))
    try:
        inputs = codec.decode_scalar_sequence(bytes(proof_public_inputs_as_bytes), SCALAR_SIZE)
    except ZKVerifyError as e:
        log.debug("rejected public inputs", extra={"code": e.code})
        raise
    return verify_groth16(
        vk_gamma_abc_g1_bytes,
        alpha_g1_beta_g2_bytes,
        gamma_g2_neg_pc_bytes,
        delta_g2_neg_pc_bytes,
        inputs,
        proof_points_as_bytes,
        curve=curve,
    )


def verify_groth16(
    vk_gamma_abc_g1_bytes: bytes,
    alpha_g1_beta_g2_bytes: bytes,
    gamma_g2_neg_pc_bytes: bytes,
    delta_g2_neg_pc_bytes: bytes,
    proof_public_inputs: Sequence[int],
    proof_points_as_bytes: bytes,
    *,
    curve: CurveLike = CurveId.BN254,
) -> bool:
    """Verify with already-decoded public inputs (ints in [0, r))."""
    try:
        pvk = PreparedVerifyingKey.deserialize(
            vk_gamma_abc_g1_bytes,
            alpha_g1_beta_g2_bytes,
            gamma_g2_neg_pc_bytes,
            delta_g2_neg_pc_bytes,
            curve=curve,
        )
        proof = decode_proof(proof_points_as_bytes, curve=curve)
    except ZKVerifyError as e:
        log.debug("rejected prepared key or proof", extra={"code": e.code})
        raise
    return verify_with_prepared_key(pvk, proof_public_inputs, proof)


def verify_with_prepared_key(
    pvk: PreparedVerifyingKey,
    public_inputs: Sequence[int],
    proof: Proof,
) -> bool:
    r = pvk.backend.scalar_modulus
    inputs = list(public_inputs)
    for i, v in enumerate(inputs):
        if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v < r:
            raise InvalidEncoding("public input is not a canonical scalar", index=i)
    return verify_proof(pvk, inputs, proof)


__all__ = [
    "SCALAR_SIZE",
    "prepare_pvk_bytes",
    "verify_groth16_in_bytes",
    "verify_groth16",
    "verify_with_prepared_key",
]
