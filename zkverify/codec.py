"""
zkverify.codec
==============

Canonical byte encodings for scalars and compressed curve points.

The layout is the arkworks `CanonicalSerialize` compressed form used by
fastcrypto / Sui style verifiers:

- Field elements and scalars are 32-byte **little-endian**.
- G1 is the `x` coordinate (32 bytes); G2 is `x.c0 || x.c1` (64 bytes).
- The two most significant bits of the **last** byte carry flags:
    bit 7  (0x80)  y is the lexicographically largest of the two roots
    bit 6  (0x40)  point at infinity
  Both set at once is invalid.
- Lexicographic order on Fq2 compares `c1` first and falls back to `c0`.
- Infinity is `x = 0` with only the infinity flag set.

Every decoded point is checked to be on the curve and in the prime-order
subgroup. There is no unchecked decoding path.

Public API
----------
    Codec(backend)                       # bound to one curve backend
    decode_scalar / encode_scalar
    decode_point_g1 / encode_point_g1
    decode_point_g2 / encode_point_g2
    decode_scalar_sequence(data, element_size=32)
    decode_g1_sequence(data)

The module-level functions use the default (BN254) backend.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from zkverify.curves import get_backend
from zkverify.curves.base import CurveBackend, Fq2, G1Point, G2Point
from zkverify.errors import InputLengthWrong, InvalidEncoding
from zkverify.logging import get_logger

log = get_logger(__name__)

FLAG_Y_LARGEST = 0x80
FLAG_INFINITY = 0x40
FLAG_MASK = FLAG_Y_LARGEST | FLAG_INFINITY


def _split_flags(data: bytes) -> Tuple[bytes, int]:
    """Strip the flag bits off the last byte; reject the invalid combination."""
    flags = data[-1] & FLAG_MASK
    if flags == FLAG_MASK:
        raise InvalidEncoding("both infinity and y-sign flags set")
    body = data[:-1] + bytes([data[-1] & ~FLAG_MASK & 0xFF])
    return body, flags


def _fq_is_largest(y: int, p: int) -> bool:
    return y > (-y) % p


def _fq2_is_largest(y: Fq2, p: int) -> bool:
    c0, c1 = y
    n0, n1 = (-c0) % p, (-c1) % p
    if c1 != n1:
        return c1 > n1
    return c0 > n0


class Codec:
    """Scalar and point (de)serialization bound to one curve backend."""

    def __init__(self, backend: CurveBackend) -> None:
        self.backend = backend
        self.p = backend.field_modulus
        self.r = backend.scalar_modulus
        self.fq_size = backend.base_field_size
        self.scalar_size = backend.scalar_size

    # --- scalars -------------------------------------------------------------

    def decode_scalar(self, data: bytes) -> int:
        if len(data) != self.scalar_size:
            raise InvalidEncoding(
                "scalar has wrong length", expected=self.scalar_size, actual=len(data)
            )
        v = int.from_bytes(data, "little")
        if v >= self.r:
            raise InvalidEncoding("scalar is not reduced modulo the group order")
        return v

    def encode_scalar(self, value: int) -> bytes:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < self.r:
            raise InvalidEncoding("scalar out of range")
        return value.to_bytes(self.scalar_size, "little")

    def decode_scalar_sequence(self, data: bytes, element_size: Optional[int] = None) -> List[int]:
        size = self.scalar_size if element_size is None else element_size
        if size != self.scalar_size:
            raise InvalidEncoding(
                "unsupported scalar element size", expected=self.scalar_size, actual=size
            )
        if len(data) % size != 0:
            raise InputLengthWrong(size, actual_length=len(data))
        return [self.decode_scalar(data[i : i + size]) for i in range(0, len(data), size)]

    # --- base field ----------------------------------------------------------

    def _decode_fq(self, data: bytes) -> int:
        v = int.from_bytes(data, "little")
        if v >= self.p:
            raise InvalidEncoding("coordinate is not a canonical field element")
        return v

    def _encode_fq(self, v: int) -> bytes:
        return v.to_bytes(self.fq_size, "little")

    # --- G1 ------------------------------------------------------------------

    def decode_point_g1(self, data: bytes) -> G1Point:
        be = self.backend
        data = bytes(data)
        if len(data) != be.g1_size:
            raise InvalidEncoding("G1 point has wrong length", expected=be.g1_size, actual=len(data))
        body, flags = _split_flags(data)
        x = self._decode_fq(body)
        if flags & FLAG_INFINITY:
            if x != 0:
                raise InvalidEncoding("non-canonical encoding of the G1 identity")
            return be.g1_identity()

        y = be.g1_y_from_x(x)
        if y is None:
            raise InvalidEncoding("x coordinate is not on the G1 curve")
        if _fq_is_largest(y, self.p) != bool(flags & FLAG_Y_LARGEST):
            y = (-y) % self.p
        P = be.g1_from_affine(x, y)
        if not be.g1_is_on_curve(P):
            raise InvalidEncoding("G1 point is not on the curve")
        if not be.g1_in_subgroup(P):
            raise InvalidEncoding("G1 point is not in the prime-order subgroup")
        return P

    def encode_point_g1(self, P: G1Point) -> bytes:
        aff = self.backend.g1_to_affine(P)
        if aff is None:
            out = bytearray(self.fq_size)
            out[-1] |= FLAG_INFINITY
            return bytes(out)
        x, y = aff
        out = bytearray(self._encode_fq(x))
        if _fq_is_largest(y, self.p):
            out[-1] |= FLAG_Y_LARGEST
        return bytes(out)

    def decode_g1_sequence(self, data: bytes) -> List[G1Point]:
        size = self.backend.g1_size
        if len(data) % size != 0:
            raise InvalidEncoding(
                "G1 sequence length is not a multiple of the point size",
                element_size=size,
                actual=len(data),
            )
        return [self.decode_point_g1(data[i : i + size]) for i in range(0, len(data), size)]

    def encode_g1_sequence(self, points: Sequence[G1Point]) -> bytes:
        return b"".join(self.encode_point_g1(P) for P in points)

    # --- G2 ------------------------------------------------------------------

    def decode_point_g2(self, data: bytes) -> G2Point:
        be = self.backend
        data = bytes(data)
        if len(data) != be.g2_size:
            raise InvalidEncoding("G2 point has wrong length", expected=be.g2_size, actual=len(data))
        body, flags = _split_flags(data)
        x = (self._decode_fq(body[: self.fq_size]), self._decode_fq(body[self.fq_size :]))
        if flags & FLAG_INFINITY:
            if x != (0, 0):
                raise InvalidEncoding("non-canonical encoding of the G2 identity")
            return be.g2_identity()

        y = be.g2_y_from_x(x)
        if y is None:
            raise InvalidEncoding("x coordinate is not on the G2 curve")
        if _fq2_is_largest(y, self.p) != bool(flags & FLAG_Y_LARGEST):
            y = ((-y[0]) % self.p, (-y[1]) % self.p)
        Q = be.g2_from_affine(x, y)
        if not be.g2_is_on_curve(Q):
            raise InvalidEncoding("G2 point is not on the curve")
        if not be.g2_in_subgroup(Q):
            raise InvalidEncoding("G2 point is not in the prime-order subgroup")
        return Q

    def encode_point_g2(self, Q: G2Point) -> bytes:
        aff = self.backend.g2_to_affine(Q)
        if aff is None:
            out = bytearray(2 * self.fq_size)
            out[-1] |= FLAG_INFINITY
            return bytes(out)
        x, y = aff
        out = bytearray(self._encode_fq(x[0]) + self._encode_fq(x[1]))
        if _fq2_is_largest(y, self.p):
            out[-1] |= FLAG_Y_LARGEST
        return bytes(out)


def default_codec() -> Codec:
    return Codec(get_backend())


def decode_scalar(data: bytes) -> int:
    return default_codec().decode_scalar(data)


def encode_scalar(value: int) -> bytes:
    return default_codec().encode_scalar(value)


def decode_scalar_sequence(data: bytes, element_size: Optional[int] = None) -> List[int]:
    return default_codec().decode_scalar_sequence(data, element_size)


def decode_point_g1(data: bytes) -> G1Point:
    return default_codec().decode_point_g1(data)


def encode_point_g1(P: G1Point) -> bytes:
    return default_codec().encode_point_g1(P)


def decode_point_g2(data: bytes) -> G2Point:
    return default_codec().decode_point_g2(data)


def encode_point_g2(Q: G2Point) -> bytes:
    return default_codec().encode_point_g2(Q)


def decode_g1_sequence(data: bytes) -> List[G1Point]:
    return default_codec().decode_g1_sequence(data)


__all__ = [
    "Codec",
    "default_codec",
    "FLAG_Y_LARGEST",
    "FLAG_INFINITY",
    "decode_scalar",
    "encode_scalar",
    "decode_scalar_sequence",
    "decode_point_g1",
    "encode_point_g1",
    "decode_point_g2",
    "encode_point_g2",
    "decode_g1_sequence",
]
