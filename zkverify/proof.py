"""Groth16 proof decoding: `a (G1) | b (G2) | c (G1)`, compressed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from zkverify.codec import Codec
from zkverify.curves import CurveId, get_backend
from zkverify.curves.base import G1Point, G2Point
from zkverify.errors import InvalidEncoding


@dataclass(frozen=True)
class Proof:
    a: G1Point
    b: G2Point
    c: G1Point


def proof_size(curve: Union[str, CurveId] = CurveId.BN254) -> int:
    be = get_backend(curve)
    return 2 * be.g1_size + be.g2_size


def decode_proof(data: bytes, *, curve: Union[str, CurveId] = CurveId.BN254) -> Proof:
    be = get_backend(curve)
    codec = Codec(be)
    data = bytes(data)
    g1, g2 = be.g1_size, be.g2_size
    if len(data) != 2 * g1 + g2:
        raise InvalidEncoding("proof has wrong length", expected=2 * g1 + g2, actual=len(data))
    return Proof(
        a=codec.decode_point_g1(data[:g1]),
        b=codec.decode_point_g2(data[g1 : g1 + g2]),
        c=codec.decode_point_g1(data[g1 + g2 :]),
    )


def encode_proof(proof: Proof, *, curve: Union[str, CurveId] = CurveId.BN254) -> bytes:
    codec = Codec(get_backend(curve))
    return (
        codec.encode_point_g1(proof.a)
        + codec.encode_point_g2(proof.b)
        + codec.encode_point_g1(proof.c)
    )


__all__ = ["Proof", "decode_proof", "encode_proof", "proof_size"]
