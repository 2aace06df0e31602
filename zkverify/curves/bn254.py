"""
zkverify.curves.bn254
=====================

BN254 (alt_bn128) backend on top of `py_ecc.optimized_bn128`.

py_ecc supplies the field towers (FQ, FQ2, FQ12), projective point
arithmetic, the twist into E(FQ12) and the final exponentiation. On top of
that this module adds the two things a Groth16 verifier wants that py_ecc
does not ship:

- **Prepared G2.** py_ecc's Miller loop evaluates each line through G2
  multiples at the G1 point. With the G1 point in affine form every such line
  is `A*x + B*y + C` over a denominator `D`, where A, B, C, D depend on the G2
  point only. `prepare_g2` walks the loop once and records (A, B, C) per line
  together with the inverse of the accumulated denominator.
- **Multi-pairing.** `multi_pairing` runs one Miller loop for all pairs,
  sharing the squaring chain of the accumulator, and applies the final
  exponentiation once.

Both follow py_ecc's loop schedule exactly (`pseudo_binary_encoding` plus the
two Frobenius lines), so the results equal py_ecc's own `pairing` after final
exponentiation.

Encodings (opaque, round-trip stable)
-------------------------------------
- GT: 12 little-endian 32-byte limbs, py_ecc FQ12 coefficient order.
- Prepared G2: b"G2PC" | curve tag (1 byte) | u16-LE line count |
  count × (A, B, C) GT limbs | denominator inverse (GT). A line count of zero
  stands for the identity, which pairs to one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    G1,
    G2,
    Z1,
    Z2,
    add,
    b,
    b2,
    curve_order,
    double,
    eq,
    field_modulus,
    final_exponentiate,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    normalize,
    pairing,
    twist,
)
from py_ecc.optimized_bn128.optimized_pairing import pseudo_binary_encoding

from zkverify.curves.base import CurveBackend, Fq2
from zkverify.errors import InvalidEncoding, VerificationError

P = int(field_modulus)
R = int(curve_order)
FIELD_SIZE = 32

G1_COFACTOR = 1

PREPARED_MAGIC = b"G2PC"
_PREPARED_HEADER = len(PREPARED_MAGIC) + 1 + 2

# Loop bits after the implicit leading one, most significant first.
_SCHEDULE: Tuple[int, ...] = tuple(pseudo_binary_encoding[63::-1])
LINE_COUNT = len(_SCHEDULE) + sum(1 for v in _SCHEDULE if v != 0) + 2

_Line = Tuple[FQ12, FQ12, FQ12]


@dataclass(frozen=True)
class PreparedG2Point:
    """Line coefficients of the Miller loop for one G2 point."""

    lines: Tuple[_Line, ...]
    den_inv: FQ12

    @property
    def is_identity(self) -> bool:
        return not self.lines


# ---------------------------------------------------------------------------
# Field helpers (ints mod P)
# ---------------------------------------------------------------------------


def _fq_sqrt(a: int) -> Optional[int]:
    # P ≡ 3 (mod 4)
    a %= P
    s = pow(a, (P + 1) // 4, P)
    return s if s * s % P == a else None


def _fq2_sqrt(a0: int, a1: int) -> Optional[Fq2]:
    """Square root in FQ2 = FQ[u]/(u^2 + 1), or None for non-residues."""
    a0 %= P
    a1 %= P
    if a1 == 0:
        s = _fq_sqrt(a0)
        if s is not None:
            return (s, 0)
        s = _fq_sqrt(-a0)
        return None if s is None else (0, s)

    n = _fq_sqrt(a0 * a0 + a1 * a1)
    if n is None:
        return None
    half = (P + 1) // 2
    x0 = _fq_sqrt((a0 + n) * half)
    if x0 is None:
        x0 = _fq_sqrt((a0 - n) * half)
    if not x0:
        return None
    x1 = a1 * pow(2 * x0, P - 2, P) % P
    if (x0 * x0 - x1 * x1 - a0) % P or (2 * x0 * x1 - a1) % P:
        return None
    return (x0, x1)


def _fq12_to_bytes(a: FQ12) -> bytes:
    return b"".join(int(c).to_bytes(FIELD_SIZE, "little") for c in a.coeffs)


def _fq12_from_bytes(data: bytes) -> FQ12:
    if len(data) != 12 * FIELD_SIZE:
        raise InvalidEncoding("GT element has wrong length", length=len(data))
    coeffs: List[int] = []
    for off in range(0, len(data), FIELD_SIZE):
        c = int.from_bytes(data[off : off + FIELD_SIZE], "little")
        if c >= P:
            raise InvalidEncoding("GT limb is not a canonical field element", offset=off)
        coeffs.append(c)
    return FQ12(coeffs)


# ---------------------------------------------------------------------------
# Miller loop precomputation
# ---------------------------------------------------------------------------


def _line_coefficients(Rp, T) -> Tuple[_Line, FQ12]:
    """
    Line through Rp and T (projective, over FQ12) as (A, B, C), D such that its
    value at an affine point (x, y) is (A*x + B*y + C) / D.
    """
    x1, y1, z1 = Rp
    x2, y2, z2 = T
    zero = x1.zero()
    m_num = y2 * z1 - y1 * z2
    m_den = x2 * z1 - x1 * z2
    if m_den != zero:
        pass
    elif m_num == zero:
        # tangent
        m_num = 3 * x1 * x1
        m_den = 2 * y1 * z1
    else:
        # vertical
        return (z1, zero, -x1), z1
    return (m_num * z1, -(m_den * z1), m_den * y1 - m_num * x1), m_den * z1


def _prepare_twisted(Q) -> PreparedG2Point:
    lines: List[_Line] = []
    den = FQ12.one()
    Rp = Q
    nQ = neg(Q)
    for v in _SCHEDULE:
        coeffs, d = _line_coefficients(Rp, Rp)
        lines.append(coeffs)
        den = den * den * d
        Rp = double(Rp)
        if v == 1:
            coeffs, d = _line_coefficients(Rp, Q)
            lines.append(coeffs)
            den = den * d
            Rp = add(Rp, Q)
        elif v == -1:
            coeffs, d = _line_coefficients(Rp, nQ)
            lines.append(coeffs)
            den = den * d
            Rp = add(Rp, nQ)

    Q1 = (Q[0] ** P, Q[1] ** P, Q[2] ** P)
    nQ2 = (Q1[0] ** P, -(Q1[1] ** P), Q1[2] ** P)
    coeffs, d = _line_coefficients(Rp, Q1)
    lines.append(coeffs)
    den = den * d
    Rp = add(Rp, Q1)
    coeffs, d = _line_coefficients(Rp, nQ2)
    lines.append(coeffs)
    den = den * d

    if len(lines) != LINE_COUNT:
        raise VerificationError("prepared G2 line count does not match the loop schedule")
    return PreparedG2Point(lines=tuple(lines), den_inv=den.inv())


def _eval_line(line: _Line, x: int, y: int) -> FQ12:
    a, b_, c = line
    return a * x + b_ * y + c


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class BN254Backend(CurveBackend):
    curve_id = "bn254"
    curve_tag = 1

    field_modulus = P
    scalar_modulus = R
    base_field_size = FIELD_SIZE
    scalar_size = 32
    gt_degree = 12

    _IDENTITY_PREPARED = PreparedG2Point(lines=(), den_inv=FQ12.one())

    # --- G1 ----------------------------------------------------------------

    def g1_identity(self):
        return Z1

    def g1_generator(self):
        return G1

    def g1_from_affine(self, x: int, y: int):
        return (FQ(x), FQ(y), FQ.one())

    def g1_to_affine(self, P1) -> Optional[Tuple[int, int]]:
        if is_inf(P1):
            return None
        x, y = normalize(P1)
        return int(x.n), int(y.n)

    def g1_y_from_x(self, x: int) -> Optional[int]:
        return _fq_sqrt(x * x * x + 3)

    def g1_is_on_curve(self, P1) -> bool:
        return bool(is_on_curve(P1, b))

    def g1_in_subgroup(self, P1) -> bool:
        # Prime order group: every curve point is in the r-torsion.
        if G1_COFACTOR == 1:
            return True
        return bool(is_inf(multiply(P1, R)))

    def g1_add(self, P1, Q1):
        return add(P1, Q1)

    def g1_mul(self, P1, k: int):
        return multiply(P1, k % R)

    def g1_neg(self, P1):
        return neg(P1)

    def g1_eq(self, P1, Q1) -> bool:
        if is_inf(P1) or is_inf(Q1):
            return bool(is_inf(P1) and is_inf(Q1))
        return bool(eq(P1, Q1))

    # --- G2 ----------------------------------------------------------------

    def g2_identity(self):
        return Z2

    def g2_generator(self):
        return G2

    def g2_from_affine(self, x: Fq2, y: Fq2):
        return (FQ2([x[0], x[1]]), FQ2([y[0], y[1]]), FQ2.one())

    def g2_to_affine(self, Q):
        if is_inf(Q):
            return None
        x, y = normalize(Q)
        return (
            (int(x.coeffs[0]), int(x.coeffs[1])),
            (int(y.coeffs[0]), int(y.coeffs[1])),
        )

    def g2_y_from_x(self, x: Fq2) -> Optional[Fq2]:
        X = FQ2([x[0], x[1]])
        rhs = X * X * X + b2
        return _fq2_sqrt(int(rhs.coeffs[0]), int(rhs.coeffs[1]))

    def g2_is_on_curve(self, Q) -> bool:
        return bool(is_on_curve(Q, b2))

    def g2_in_subgroup(self, Q) -> bool:
        return bool(is_inf(multiply(Q, R)))

    def g2_mul(self, Q, k: int):
        return multiply(Q, k % R)

    def g2_neg(self, Q):
        return neg(Q)

    def g2_eq(self, P2, Q2) -> bool:
        if is_inf(P2) or is_inf(Q2):
            return bool(is_inf(P2) and is_inf(Q2))
        return bool(eq(P2, Q2))

    # --- pairing -----------------------------------------------------------

    def pairing(self, P1, Q2) -> FQ12:
        # py_ecc takes (G2, G1)
        return pairing(Q2, P1)

    def prepare_g2(self, Q2) -> PreparedG2Point:
        aff = self.g2_to_affine(Q2)
        if aff is None:
            return self._IDENTITY_PREPARED
        # Line coefficients depend on the projective representative; fix z = 1.
        return _prepare_twisted(twist(self.g2_from_affine(*aff)))

    def multi_pairing(self, pairs: Sequence[Tuple[object, PreparedG2Point]]) -> FQ12:
        active = []
        for P1, pq in pairs:
            if pq.is_identity:
                continue
            aff = self.g1_to_affine(P1)
            if aff is None:
                continue
            active.append((aff, iter(pq.lines), pq.den_inv))
        if not active:
            return FQ12.one()

        f = FQ12.one()
        for v in _SCHEDULE:
            f = f * f
            for (x, y), lines, _ in active:
                f = f * _eval_line(next(lines), x, y)
            if v != 0:
                for (x, y), lines, _ in active:
                    f = f * _eval_line(next(lines), x, y)
        for _ in range(2):
            for (x, y), lines, _ in active:
                f = f * _eval_line(next(lines), x, y)
        for _, _, den_inv in active:
            f = f * den_inv
        return final_exponentiate(f)

    def gt_one(self) -> FQ12:
        return FQ12.one()

    def gt_eq(self, a: FQ12, b_: FQ12) -> bool:
        return tuple(int(c) for c in a.coeffs) == tuple(int(c) for c in b_.coeffs)

    # --- encodings -----------------------------------------------------------

    def encode_gt(self, a: FQ12) -> bytes:
        return _fq12_to_bytes(a)

    def decode_gt(self, data: bytes) -> FQ12:
        return _fq12_from_bytes(bytes(data))

    def encode_prepared_g2(self, pq: PreparedG2Point) -> bytes:
        out = bytearray(PREPARED_MAGIC)
        out.append(self.curve_tag)
        out += len(pq.lines).to_bytes(2, "little")
        for line in pq.lines:
            for c in line:
                out += _fq12_to_bytes(c)
        if pq.lines:
            out += _fq12_to_bytes(pq.den_inv)
        return bytes(out)

    def decode_prepared_g2(self, data: bytes) -> PreparedG2Point:
        data = bytes(data)
        if len(data) < _PREPARED_HEADER or data[: len(PREPARED_MAGIC)] != PREPARED_MAGIC:
            raise VerificationError("prepared G2 blob has no valid header", length=len(data))
        tag = data[len(PREPARED_MAGIC)]
        if tag != self.curve_tag:
            raise VerificationError("prepared G2 blob is for another curve", tag=tag)
        count = int.from_bytes(data[len(PREPARED_MAGIC) + 1 : _PREPARED_HEADER], "little")
        if count == 0:
            if len(data) != _PREPARED_HEADER:
                raise VerificationError("prepared identity blob has trailing bytes", length=len(data))
            return self._IDENTITY_PREPARED
        if count != LINE_COUNT:
            raise VerificationError(
                "prepared G2 line count does not match the loop schedule",
                expected=LINE_COUNT,
                actual=count,
            )
        gt = self.gt_size
        expected = _PREPARED_HEADER + (3 * count + 1) * gt
        if len(data) != expected:
            raise VerificationError(
                "prepared G2 blob has wrong length", expected=expected, actual=len(data)
            )
        off = _PREPARED_HEADER
        lines: List[_Line] = []
        for _ in range(count):
            a = _fq12_from_bytes(data[off : off + gt])
            b_ = _fq12_from_bytes(data[off + gt : off + 2 * gt])
            c = _fq12_from_bytes(data[off + 2 * gt : off + 3 * gt])
            lines.append((a, b_, c))
            off += 3 * gt
        den_inv = _fq12_from_bytes(data[off : off + gt])
        return PreparedG2Point(lines=tuple(lines), den_inv=den_inv)


__all__ = [
    "BN254Backend",
    "PreparedG2Point",
    "LINE_COUNT",
    "PREPARED_MAGIC",
    "G1_COFACTOR",
]
