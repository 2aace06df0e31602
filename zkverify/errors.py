"""
zkverify.errors
---------------

Error taxonomy for the Groth16 verifier.

Design goals
------------
- One root `ZKVerifyError` with a machine-friendly `code` and optional `data`.
- Decode-time structural failures are *errors*; a well-formed proof that does
  not satisfy the pairing equation is *not* an error (the API returns False).
- Safe JSON representation (`to_dict`) for logs and CLI output. Messages carry
  sizes and offsets only, never key or proof material.

Hierarchy
---------
    ZKVerifyError
     ├── InvalidEncoding          (alias: InvalidInput)
     ├── InputLengthWrong
     ├── PublicInputCountMismatch
     ├── VerificationError
     ├── UnsupportedCurve
     └── ConfigError
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INVALID_ENCODING = "ZK/INVALID_ENCODING"
    INPUT_LENGTH_WRONG = "ZK/INPUT_LENGTH_WRONG"
    PUBLIC_INPUT_COUNT = "ZK/PUBLIC_INPUT_COUNT"
    VERIFICATION = "ZK/VERIFICATION"
    UNSUPPORTED_CURVE = "ZK/UNSUPPORTED_CURVE"
    CONFIG = "ZK/CONFIG"


class ZKVerifyError(Exception):
    """
    Root error for zkverify.

    Attributes
    ----------
    code: str
        Machine-stable error code (see ErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        Optional JSON-serializable context (sizes, offsets, counts).
    """

    code: str = ErrorCode.VERIFICATION.value

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message
        self.data: Dict[str, Any] = dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs/CLI output."""
        return {
            "code": str(self.code),
            "message": self.message,
            "data": dict(self.data),
        }

    def __str__(self) -> str:
        if self.data:
            preview = ", ".join(f"{k}={v}" for k, v in self.data.items())
            return f"{self.code}: {self.message} [{preview}]"
        return f"{self.code}: {self.message}"


class InvalidEncoding(ZKVerifyError):
    """Bytes do not decode to a well-formed scalar, point, proof or key."""

    code = ErrorCode.INVALID_ENCODING.value

    def __init__(self, message: str = "invalid encoding", **data: Any) -> None:
        super().__init__(message, data=data)


# Name used by the byte-level API for decode failures of whole structures.
InvalidInput = InvalidEncoding


class InputLengthWrong(ZKVerifyError):
    """A variable-length buffer is not a multiple of the element size."""

    code = ErrorCode.INPUT_LENGTH_WRONG.value

    def __init__(self, expected_multiple: int, actual_length: Optional[int] = None) -> None:
        data: Dict[str, Any] = {"expected_multiple": expected_multiple}
        if actual_length is not None:
            data["actual_length"] = actual_length
        super().__init__(
            f"input length must be a multiple of {expected_multiple}", data=data
        )
        self.expected_multiple = expected_multiple

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InputLengthWrong):
            return NotImplemented
        return self.expected_multiple == other.expected_multiple

    def __hash__(self) -> int:
        return hash((type(self), self.expected_multiple))


class PublicInputCountMismatch(ZKVerifyError):
    """len(public_inputs) + 1 != len(vk_gamma_abc_g1)."""

    code = ErrorCode.PUBLIC_INPUT_COUNT.value

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"expected {expected} public inputs, got {actual}",
            data={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class VerificationError(ZKVerifyError):
    """Internal failure distinct from "the proof is false"."""

    code = ErrorCode.VERIFICATION.value

    def __init__(self, detail: str, **data: Any) -> None:
        super().__init__(detail, data=data)
        self.detail = detail


class UnsupportedCurve(ZKVerifyError):
    code = ErrorCode.UNSUPPORTED_CURVE.value

    def __init__(self, curve: str) -> None:
        super().__init__(f"unsupported curve '{curve}'", data={"curve": curve})
        self.curve = curve


class ConfigError(ZKVerifyError):
    code = ErrorCode.CONFIG.value

    def __init__(self, message: str, **data: Any) -> None:
        super().__init__(message, data=data)


__all__ = [
    "ErrorCode",
    "ZKVerifyError",
    "InvalidEncoding",
    "InvalidInput",
    "InputLengthWrong",
    "PublicInputCountMismatch",
    "VerificationError",
    "UnsupportedCurve",
    "ConfigError",
]
