"""
zkverify — Groth16 verification over BN254 from serialized bytes

Prepare a verifying key once, verify many proofs against it:

>>> from zkverify import prepare_pvk_bytes, verify_groth16_in_bytes
>>> pvk = prepare_pvk_bytes(vk_bytes)                          # doctest: +SKIP
>>> verify_groth16_in_bytes(*pvk, inputs_bytes, proof_bytes)   # doctest: +SKIP
True

Encodings are the arkworks compressed forms (little-endian, flags in the
top bits of the last byte). Every point read from bytes is checked to be on
the curve and in the prime-order subgroup. A proof that does not verify
returns False; malformed bytes raise a `ZKVerifyError` subclass.

Submodules
----------
- `zkverify.codec`    scalar / point encodings
- `zkverify.keys`     VerifyingKey, PreparedVerifyingKey
- `zkverify.proof`    Proof decoding
- `zkverify.pairing`  the verification equation
- `zkverify.curves`   curve backends (py_ecc for BN254)
- `zkverify.types`    msgspec records for files and batch requests
- `zkverify.snarkjs`  snarkjs JSON import
- `zkverify.cli`      the `zkverify` command
"""

from __future__ import annotations

from zkverify.api import (SCALAR_SIZE, prepare_pvk_bytes, verify_groth16,
                          verify_groth16_in_bytes, verify_with_prepared_key)
from zkverify.curves import CurveId, get_backend, list_curves
from zkverify.errors import (ConfigError, InputLengthWrong, InvalidEncoding, InvalidInput,
                             PublicInputCountMismatch, UnsupportedCurve, VerificationError,
                             ZKVerifyError)
from zkverify.keys import (PreparedVerifyingKey, VerifyingKey, decode_verifying_key,
                           encode_verifying_key, prepare_verifying_key)
from zkverify.proof import Proof, decode_proof, encode_proof

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SCALAR_SIZE",
    "prepare_pvk_bytes",
    "verify_groth16_in_bytes",
    "verify_groth16",
    "verify_with_prepared_key",
    "VerifyingKey",
    "PreparedVerifyingKey",
    "decode_verifying_key",
    "encode_verifying_key",
    "prepare_verifying_key",
    "Proof",
    "decode_proof",
    "encode_proof",
    "CurveId",
    "get_backend",
    "list_curves",
    "ZKVerifyError",
    "InvalidEncoding",
    "InvalidInput",
    "InputLengthWrong",
    "PublicInputCountMismatch",
    "VerificationError",
    "UnsupportedCurve",
    "ConfigError",
]
