"""
zkverify.snarkjs
================

Convert SnarkJS Groth16 JSON artifacts (curve "bn128") into the canonical
compressed byte forms accepted by `zkverify.api`.

Shapes
------
Verifying key (vk.json):
{
  "protocol": "groth16",
  "curve": "bn128",
  "vk_alpha_1": ["x", "y", "1"],
  "vk_beta_2":  [["x0", "x1"], ["y0", "y1"], ["1", "0"]],
  "vk_gamma_2": [...],
  "vk_delta_2": [...],
  "IC": [["x", "y", "1"], ...]
}

Proof (proof.json), either flat or wrapped as {"proof": {...}, "publicSignals": [...]}:
{
  "pi_a": ["x", "y", "1"],
  "pi_b": [["x0", "x1"], ["y0", "y1"], ["1", "0"]],
  "pi_c": ["x", "y", "1"]
}

Public signals (public.json): ["123", "0x45", ...]

Numbers may be decimal strings, 0x-hex strings or JSON integers. G2
coordinates are `[c0, c1]` for `c0 + c1*u`. The projective identity is
`["0", "1", "0"]` (G1) / `[["0","0"],["1","0"],["0","0"]]` (G2). Every point is
validated (on curve, in subgroup) before it is re-encoded.
"""

from __future__ import annotations

import os
from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar, Union

import msgspec

from zkverify.codec import Codec
from zkverify.curves import CurveId, get_backend
from zkverify.curves.base import CurveBackend, G1Point, G2Point
from zkverify.errors import InvalidEncoding
from zkverify.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

Num = Union[int, str]
JsonSource = Union[str, bytes, bytearray, "os.PathLike[str]", Mapping[str, Any], list]


class SnarkjsVerifyingKey(msgspec.Struct):
    vk_alpha_1: List[Num]
    vk_beta_2: List[List[Num]]
    vk_gamma_2: List[List[Num]]
    vk_delta_2: List[List[Num]]
    IC: List[List[Num]]
    protocol: Optional[str] = None
    curve: Optional[str] = None
    nPublic: Optional[int] = None


class SnarkjsProof(msgspec.Struct):
    pi_a: List[Num]
    pi_b: List[List[Num]]
    pi_c: List[Num]
    protocol: Optional[str] = None
    curve: Optional[str] = None


class SnarkjsProofBundle(msgspec.Struct):
    proof: SnarkjsProof
    publicSignals: List[Num] = msgspec.field(default_factory=list)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _load(source: JsonSource) -> Any:
    """dict/list as-is, a file path, or JSON text/bytes."""
    if isinstance(source, (Mapping, list)):
        return source
    if isinstance(source, (bytes, bytearray)):
        raw = bytes(source)
    else:
        s = os.fspath(source)
        if os.path.isfile(s):
            with open(s, "rb") as f:
                raw = f.read()
        else:
            raw = s.encode("utf-8")
    try:
        return msgspec.json.decode(raw)
    except msgspec.DecodeError as e:
        raise InvalidEncoding(f"not valid JSON: {e}") from e


def _convert(obj: Any, type: Type[T]) -> T:
    try:
        return msgspec.convert(obj, type=type)
    except msgspec.ValidationError as e:
        raise InvalidEncoding(f"unexpected snarkjs shape: {e}") from e


def _to_int(v: Num) -> int:
    if isinstance(v, bool):
        raise InvalidEncoding("boolean is not a number")
    if isinstance(v, int):
        return v
    s = v.strip().lower()
    try:
        return int(s, 16) if s.startswith("0x") else int(s, 10)
    except ValueError as e:
        raise InvalidEncoding(f"not a number: {v!r}") from e


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


def _coord(be: CurveBackend, v: Num) -> int:
    n = _to_int(v)
    if not 0 <= n < be.field_modulus:
        raise InvalidEncoding("coordinate out of field range")
    return n


def _g1(be: CurveBackend, xs: Sequence[Num]) -> G1Point:
    if len(xs) not in (2, 3):
        raise InvalidEncoding("G1 point needs 2 or 3 coordinates", actual=len(xs))
    x, y = _coord(be, xs[0]), _coord(be, xs[1])
    z = _coord(be, xs[2]) if len(xs) == 3 else 1
    if z == 0:
        return be.g1_identity()
    if z != 1:
        raise InvalidEncoding("G1 point is not in affine form")
    P = be.g1_from_affine(x, y)
    if not be.g1_is_on_curve(P) or not be.g1_in_subgroup(P):
        raise InvalidEncoding("G1 point is not a valid group element")
    return P


def _g2(be: CurveBackend, xs: Sequence[Sequence[Num]]) -> G2Point:
    if len(xs) not in (2, 3) or any(len(c) != 2 for c in xs):
        raise InvalidEncoding("G2 point needs 2 or 3 Fq2 coordinates")
    x = (_coord(be, xs[0][0]), _coord(be, xs[0][1]))
    y = (_coord(be, xs[1][0]), _coord(be, xs[1][1]))
    z = (_coord(be, xs[2][0]), _coord(be, xs[2][1])) if len(xs) == 3 else (1, 0)
    if z == (0, 0):
        return be.g2_identity()
    if z != (1, 0):
        raise InvalidEncoding("G2 point is not in affine form")
    Q = be.g2_from_affine(x, y)
    if not be.g2_is_on_curve(Q) or not be.g2_in_subgroup(Q):
        raise InvalidEncoding("G2 point is not a valid group element")
    return Q


# ---------------------------------------------------------------------------
# Public converters
# ---------------------------------------------------------------------------


def vk_bytes_from_snarkjs(
    source: JsonSource, *, curve: Union[str, CurveId] = CurveId.BN254
) -> bytes:
    be = get_backend(curve)
    codec = Codec(be)
    vk = _convert(_load(source), SnarkjsVerifyingKey)
    if vk.protocol not in (None, "groth16"):
        raise InvalidEncoding(f"unsupported protocol {vk.protocol!r}")
    if not vk.IC:
        raise InvalidEncoding("verifying key has an empty IC list")
    if vk.nPublic is not None and vk.nPublic != len(vk.IC) - 1:
        raise InvalidEncoding("nPublic does not match the IC length")

    parts = [
        codec.encode_point_g1(_g1(be, vk.vk_alpha_1)),
        codec.encode_point_g2(_g2(be, vk.vk_beta_2)),
        codec.encode_point_g2(_g2(be, vk.vk_gamma_2)),
        codec.encode_point_g2(_g2(be, vk.vk_delta_2)),
        len(vk.IC).to_bytes(8, "little"),
    ]
    parts.extend(codec.encode_point_g1(_g1(be, p)) for p in vk.IC)
    log.debug("converted snarkjs verifying key", extra={"ic": len(vk.IC)})
    return b"".join(parts)


def _proof_struct(obj: Any) -> SnarkjsProof:
    if isinstance(obj, Mapping) and "proof" in obj:
        return _convert(obj, SnarkjsProofBundle).proof
    return _convert(obj, SnarkjsProof)


def proof_bytes_from_snarkjs(
    source: JsonSource, *, curve: Union[str, CurveId] = CurveId.BN254
) -> bytes:
    be = get_backend(curve)
    codec = Codec(be)
    pf = _proof_struct(_load(source))
    return (
        codec.encode_point_g1(_g1(be, pf.pi_a))
        + codec.encode_point_g2(_g2(be, pf.pi_b))
        + codec.encode_point_g1(_g1(be, pf.pi_c))
    )


def public_inputs_from_snarkjs(
    source: JsonSource, *, curve: Union[str, CurveId] = CurveId.BN254
) -> bytes:
    """Public signals as concatenated 32-byte little-endian scalars."""
    codec = Codec(get_backend(curve))
    obj = _load(source)
    if isinstance(obj, Mapping):
        signals = _convert(obj, SnarkjsProofBundle).publicSignals
    else:
        signals = _convert(obj, List[Num])
    out = bytearray()
    for v in signals:
        out += codec.encode_scalar(_to_int(v))
    return bytes(out)


__all__ = [
    "SnarkjsVerifyingKey",
    "SnarkjsProof",
    "SnarkjsProofBundle",
    "vk_bytes_from_snarkjs",
    "proof_bytes_from_snarkjs",
    "public_inputs_from_snarkjs",
]
