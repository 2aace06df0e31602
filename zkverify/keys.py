"""
zkverify.keys
=============

Groth16 verifying keys and their prepared (verification-optimized) form.

Wire form of a verifying key (compressed, little-endian)
--------------------------------------------------------
    alpha_g1 (G1) | beta_g2 (G2) | gamma_g2 (G2) | delta_g2 (G2)
    | u64 count | count × gamma_abc_g1 (G1)

Prepared verifying key
----------------------
    vk_gamma_abc_g1   the input-commitment bases, kept as G1 points
    alpha_g1_beta_g2  e(alpha_g1, beta_g2), computed once
    gamma_g2_neg_pc   pairing-ready form of -gamma_g2
    delta_g2_neg_pc   pairing-ready form of -delta_g2

`as_serialized()` returns these four as independent byte buffers in that
order; `deserialize()` is its exact inverse. Both are deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, Union

from zkverify.codec import Codec
from zkverify.curves import CurveId, get_backend
from zkverify.curves.base import CurveBackend, G1Point, G2Point, GTElement, PreparedG2
from zkverify.errors import InvalidEncoding
from zkverify.logging import get_logger

log = get_logger(__name__)

COUNT_SIZE = 8


@dataclass(frozen=True)
class VerifyingKey:
    alpha_g1: G1Point
    beta_g2: G2Point
    gamma_g2: G2Point
    delta_g2: G2Point
    gamma_abc_g1: Tuple[G1Point, ...]

    @property
    def num_public_inputs(self) -> int:
        return len(self.gamma_abc_g1) - 1


@dataclass(frozen=True)
class PreparedVerifyingKey:
    vk_gamma_abc_g1: Tuple[G1Point, ...]
    alpha_g1_beta_g2: GTElement
    gamma_g2_neg_pc: PreparedG2
    delta_g2_neg_pc: PreparedG2
    curve: str = CurveId.BN254.value
    _backend: CurveBackend = field(default=None, repr=False, compare=False)  # type: ignore[assignment]

    @property
    def backend(self) -> CurveBackend:
        return self._backend if self._backend is not None else get_backend(self.curve)

    @property
    def num_public_inputs(self) -> int:
        return len(self.vk_gamma_abc_g1) - 1

    def as_serialized(self) -> List[bytes]:
        """Four byte buffers, in fixed order, that `deserialize` accepts."""
        be = self.backend
        codec = Codec(be)
        return [
            codec.encode_g1_sequence(self.vk_gamma_abc_g1),
            be.encode_gt(self.alpha_g1_beta_g2),
            be.encode_prepared_g2(self.gamma_g2_neg_pc),
            be.encode_prepared_g2(self.delta_g2_neg_pc),
        ]

    @classmethod
    def deserialize(
        cls,
        vk_gamma_abc_g1: bytes,
        alpha_g1_beta_g2: bytes,
        gamma_g2_neg_pc: bytes,
        delta_g2_neg_pc: bytes,
        *,
        curve: Union[str, CurveId] = CurveId.BN254,
    ) -> "PreparedVerifyingKey":
        be = get_backend(curve)
        codec = Codec(be)
        points = codec.decode_g1_sequence(bytes(vk_gamma_abc_g1))
        if not points:
            raise InvalidEncoding("vk_gamma_abc_g1 must hold at least one point")
        pvk = cls(
            vk_gamma_abc_g1=tuple(points),
            alpha_g1_beta_g2=be.decode_gt(bytes(alpha_g1_beta_g2)),
            gamma_g2_neg_pc=be.decode_prepared_g2(bytes(gamma_g2_neg_pc)),
            delta_g2_neg_pc=be.decode_prepared_g2(bytes(delta_g2_neg_pc)),
            curve=be.curve_id,
            _backend=be,
        )
        log.debug("deserialized prepared key", extra={"num_public_inputs": pvk.num_public_inputs})
        return pvk


# ---------------------------------------------------------------------------
# Verifying key (de)serialization
# ---------------------------------------------------------------------------


def decode_verifying_key(
    data: bytes, *, curve: Union[str, CurveId] = CurveId.BN254
) -> VerifyingKey:
    """
    Parse the compressed verifying key layout. Every point is fully validated.
    Truncated input, trailing bytes or a zero-length input commitment list
    raise InvalidEncoding.
    """
    be = get_backend(curve)
    codec = Codec(be)
    data = bytes(data)
    g1, g2 = be.g1_size, be.g2_size
    head = g1 + 3 * g2
    if len(data) < head + COUNT_SIZE:
        raise InvalidEncoding("verifying key is truncated", length=len(data))

    off = 0
    alpha = codec.decode_point_g1(data[off : off + g1])
    off += g1
    beta = codec.decode_point_g2(data[off : off + g2])
    off += g2
    gamma = codec.decode_point_g2(data[off : off + g2])
    off += g2
    delta = codec.decode_point_g2(data[off : off + g2])
    off += g2

    count = int.from_bytes(data[off : off + COUNT_SIZE], "little")
    off += COUNT_SIZE
    if count < 1:
        raise InvalidEncoding("verifying key has no input commitment bases")
    if len(data) - off != count * g1:
        raise InvalidEncoding(
            "verifying key length does not match its point count",
            count=count,
            remaining=len(data) - off,
        )
    abc = codec.decode_g1_sequence(data[off:])
    return VerifyingKey(
        alpha_g1=alpha,
        beta_g2=beta,
        gamma_g2=gamma,
        delta_g2=delta,
        gamma_abc_g1=tuple(abc),
    )


def encode_verifying_key(
    vk: VerifyingKey, *, curve: Union[str, CurveId] = CurveId.BN254
) -> bytes:
    codec = Codec(get_backend(curve))
    return b"".join(
        [
            codec.encode_point_g1(vk.alpha_g1),
            codec.encode_point_g2(vk.beta_g2),
            codec.encode_point_g2(vk.gamma_g2),
            codec.encode_point_g2(vk.delta_g2),
            len(vk.gamma_abc_g1).to_bytes(COUNT_SIZE, "little"),
            codec.encode_g1_sequence(vk.gamma_abc_g1),
        ]
    )


def make_verifying_key(
    alpha_g1: G1Point,
    beta_g2: G2Point,
    gamma_g2: G2Point,
    delta_g2: G2Point,
    gamma_abc_g1: Sequence[G1Point],
) -> VerifyingKey:
    if not gamma_abc_g1:
        raise InvalidEncoding("verifying key has no input commitment bases")
    return VerifyingKey(alpha_g1, beta_g2, gamma_g2, delta_g2, tuple(gamma_abc_g1))


def prepare_verifying_key(
    vk: VerifyingKey, *, curve: Union[str, CurveId] = CurveId.BN254
) -> PreparedVerifyingKey:
    """Eagerly compute e(alpha, beta) and the prepared -gamma / -delta."""
    be = get_backend(curve)
    pvk = PreparedVerifyingKey(
        vk_gamma_abc_g1=tuple(vk.gamma_abc_g1),
        alpha_g1_beta_g2=be.pairing(vk.alpha_g1, vk.beta_g2),
        gamma_g2_neg_pc=be.prepare_g2(be.g2_neg(vk.gamma_g2)),
        delta_g2_neg_pc=be.prepare_g2(be.g2_neg(vk.delta_g2)),
        curve=be.curve_id,
        _backend=be,
    )
    log.debug("prepared verifying key", extra={"num_public_inputs": pvk.num_public_inputs})
    return pvk


__all__ = [
    "VerifyingKey",
    "PreparedVerifyingKey",
    "decode_verifying_key",
    "encode_verifying_key",
    "make_verifying_key",
    "prepare_verifying_key",
]
