"""
zkverify.curves.base
====================

Capability interface every pairing-friendly curve backend implements.

The verification layers above (codec, key preparation, pairing check) are
written against this interface only, so a new curve is a new backend class
plus a registry entry; no verification logic is duplicated.

Conventions
-----------
- Base-field elements cross the interface as plain `int`s in `[0, p)`.
- Quadratic-extension elements cross as `(c0, c1)` int pairs for `c0 + c1*u`.
- Group elements (G1, G2, GT, prepared G2) are opaque backend objects.
- Predicates never raise on malformed *values*; they return False.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Sequence, Tuple

Fq2 = Tuple[int, int]

G1Point = Any
G2Point = Any
GTElement = Any
PreparedG2 = Any


class CurveBackend(ABC):
    """Field, group and pairing operations for one curve."""

    #: Stable identifier used in the registry and in prepared-key records.
    curve_id: str = ""
    #: One-byte tag embedded in opaque prepared-G2 blobs.
    curve_tag: int = 0

    field_modulus: int = 0
    scalar_modulus: int = 0

    base_field_size: int = 32
    scalar_size: int = 32
    gt_degree: int = 12

    # --- sizes ---------------------------------------------------------------

    @property
    def g1_size(self) -> int:
        return self.base_field_size

    @property
    def g2_size(self) -> int:
        return 2 * self.base_field_size

    @property
    def gt_size(self) -> int:
        return self.gt_degree * self.base_field_size

    # --- G1 ------------------------------------------------------------------

    @abstractmethod
    def g1_identity(self) -> G1Point: ...

    @abstractmethod
    def g1_generator(self) -> G1Point: ...

    @abstractmethod
    def g1_from_affine(self, x: int, y: int) -> G1Point: ...

    @abstractmethod
    def g1_to_affine(self, P: G1Point) -> Optional[Tuple[int, int]]:
        """Affine (x, y), or None for the identity."""

    @abstractmethod
    def g1_y_from_x(self, x: int) -> Optional[int]:
        """Some y with (x, y) on the curve, or None if x is not an abscissa."""

    @abstractmethod
    def g1_is_on_curve(self, P: G1Point) -> bool: ...

    @abstractmethod
    def g1_in_subgroup(self, P: G1Point) -> bool:
        """Membership in the order-r subgroup, assuming P is on the curve."""

    @abstractmethod
    def g1_add(self, P: G1Point, Q: G1Point) -> G1Point: ...

    @abstractmethod
    def g1_mul(self, P: G1Point, k: int) -> G1Point: ...

    @abstractmethod
    def g1_neg(self, P: G1Point) -> G1Point: ...

    @abstractmethod
    def g1_eq(self, P: G1Point, Q: G1Point) -> bool: ...

    def g1_is_identity(self, P: G1Point) -> bool:
        return self.g1_to_affine(P) is None

    def g1_msm(self, points: Sequence[G1Point], scalars: Iterable[int]) -> G1Point:
        """Σ scalars[i] * points[i]; zero scalars are skipped."""
        acc = self.g1_identity()
        for P, k in zip(points, scalars):
            k %= self.scalar_modulus
            if k:
                acc = self.g1_add(acc, self.g1_mul(P, k))
        return acc

    # --- G2 ------------------------------------------------------------------

    @abstractmethod
    def g2_identity(self) -> G2Point: ...

    @abstractmethod
    def g2_generator(self) -> G2Point: ...

    @abstractmethod
    def g2_from_affine(self, x: Fq2, y: Fq2) -> G2Point: ...

    @abstractmethod
    def g2_to_affine(self, Q: G2Point) -> Optional[Tuple[Fq2, Fq2]]: ...

    @abstractmethod
    def g2_y_from_x(self, x: Fq2) -> Optional[Fq2]: ...

    @abstractmethod
    def g2_is_on_curve(self, Q: G2Point) -> bool: ...

    @abstractmethod
    def g2_in_subgroup(self, Q: G2Point) -> bool: ...

    @abstractmethod
    def g2_mul(self, Q: G2Point, k: int) -> G2Point: ...

    @abstractmethod
    def g2_neg(self, Q: G2Point) -> G2Point: ...

    @abstractmethod
    def g2_eq(self, P: G2Point, Q: G2Point) -> bool: ...

    def g2_is_identity(self, Q: G2Point) -> bool:
        return self.g2_to_affine(Q) is None

    # --- pairing ---------------------------------------------------------------

    @abstractmethod
    def pairing(self, P: G1Point, Q: G2Point) -> GTElement:
        """Full pairing e(P, Q) including final exponentiation."""

    @abstractmethod
    def prepare_g2(self, Q: G2Point) -> PreparedG2:
        """Pairing-ready precomputation of Q (depends on Q only)."""

    @abstractmethod
    def multi_pairing(self, pairs: Sequence[Tuple[G1Point, PreparedG2]]) -> GTElement:
        """Π e(P_i, Q_i) with one shared final exponentiation."""

    @abstractmethod
    def gt_one(self) -> GTElement: ...

    @abstractmethod
    def gt_eq(self, a: GTElement, b: GTElement) -> bool: ...

    # --- opaque encodings ------------------------------------------------------

    @abstractmethod
    def encode_gt(self, a: GTElement) -> bytes: ...

    @abstractmethod
    def decode_gt(self, data: bytes) -> GTElement: ...

    @abstractmethod
    def encode_prepared_g2(self, pq: PreparedG2) -> bytes: ...

    @abstractmethod
    def decode_prepared_g2(self, data: bytes) -> PreparedG2: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(curve_id={self.curve_id!r})"


__all__ = [
    "CurveBackend",
    "Fq2",
    "G1Point",
    "G2Point",
    "GTElement",
    "PreparedG2",
]
