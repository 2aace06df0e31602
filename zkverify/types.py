"""
zkverify.types
==============

Typed records using **msgspec** for moving prepared keys and verification
requests through files and processes.

- `PreparedKeyRecord`: the four prepared-key buffers as hex, plus the curve,
  the number of public inputs and a hash binding the record to the raw
  verifying key it was prepared from.
- `VerifyRequest`: one proof plus its public inputs (hex).
- `VerifyOutcome`: result of one request (`ok` or an error dict).

Conventions
-----------
- All byte fields are lowercase hex without `0x`; decoders accept an optional
  `0x` prefix.
- `vk_hash` is `"sha3-256:<hex>"` over the raw compressed verifying key bytes.
"""

from __future__ import annotations

from hashlib import sha3_256
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import msgspec

from zkverify.errors import InvalidEncoding

T = TypeVar("T")

VK_HASH_PREFIX = "sha3-256:"


def hex_to_bytes(s: str) -> bytes:
    s = s.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise InvalidEncoding("not a hex string") from e


def compute_vk_hash(vk_bytes: bytes) -> str:
    return VK_HASH_PREFIX + sha3_256(bytes(vk_bytes)).hexdigest()


class PreparedKeyRecord(msgspec.Struct, frozen=True, omit_defaults=True):
    """
    Serialized prepared verifying key.

    Fields:
        curve: Curve id ("bn254").
        vk_gamma_abc_g1, alpha_g1_beta_g2, gamma_g2_neg_pc, delta_g2_neg_pc:
            The `PreparedVerifyingKey.as_serialized()` buffers, hex encoded.
        num_public_inputs: len(vk_gamma_abc_g1) - 1.
        vk_hash: Hash of the source verifying key (optional).
    """

    curve: str
    vk_gamma_abc_g1: str
    alpha_g1_beta_g2: str
    gamma_g2_neg_pc: str
    delta_g2_neg_pc: str
    num_public_inputs: int
    vk_hash: str = ""

    def to_buffers(self) -> List[bytes]:
        return [
            hex_to_bytes(self.vk_gamma_abc_g1),
            hex_to_bytes(self.alpha_g1_beta_g2),
            hex_to_bytes(self.gamma_g2_neg_pc),
            hex_to_bytes(self.delta_g2_neg_pc),
        ]

    @classmethod
    def from_buffers(
        cls,
        buffers: Sequence[bytes],
        *,
        curve: str = "bn254",
        g1_size: int = 32,
        vk_bytes: Optional[bytes] = None,
    ) -> "PreparedKeyRecord":
        if len(buffers) != 4:
            raise InvalidEncoding("prepared key needs exactly four buffers", actual=len(buffers))
        abc, gt, gamma, delta = (bytes(b) for b in buffers)
        return cls(
            curve=curve,
            vk_gamma_abc_g1=abc.hex(),
            alpha_g1_beta_g2=gt.hex(),
            gamma_g2_neg_pc=gamma.hex(),
            delta_g2_neg_pc=delta.hex(),
            num_public_inputs=len(abc) // g1_size - 1,
            vk_hash=compute_vk_hash(vk_bytes) if vk_bytes is not None else "",
        )


class VerifyRequest(msgspec.Struct, frozen=True, omit_defaults=True):
    public_inputs: str
    proof: str
    id: Optional[str] = None

    def input_bytes(self) -> bytes:
        return hex_to_bytes(self.public_inputs)

    def proof_bytes(self) -> bytes:
        return hex_to_bytes(self.proof)


class VerifyOutcome(msgspec.Struct, frozen=True, omit_defaults=True):
    ok: bool
    id: Optional[str] = None
    error: Optional[Dict[str, Any]] = None


_ENCODER = msgspec.json.Encoder()


def encode_json(obj: Any) -> bytes:
    return _ENCODER.encode(obj)


def decode_json(data: bytes, type: Type[T]) -> T:
    """Decode JSON into `type`; schema errors surface as InvalidEncoding."""
    try:
        return msgspec.json.decode(data, type=type)
    except msgspec.DecodeError as e:
        raise InvalidEncoding(f"malformed record: {e}") from e


__all__ = [
    "PreparedKeyRecord",
    "VerifyRequest",
    "VerifyOutcome",
    "compute_vk_hash",
    "hex_to_bytes",
    "encode_json",
    "decode_json",
    "VK_HASH_PREFIX",
]
