"""
zkverify.curves
===============

A tiny, threadsafe registry that maps a **curve identity** to the backend
class implementing `CurveBackend` for it.

Design goals
------------
- Small surface: register, get, list.
- Threadsafe updates (RLock); backends are instantiated lazily and cached.
- Helpful errors (`UnsupportedCurve`).

Curves (defaults)
-----------------
- "bn254" (aliases "bn128", "alt_bn128") → zkverify.curves.bn254:BN254Backend
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from importlib import import_module
from threading import RLock
from typing import Dict, List, Tuple, Union

from zkverify.curves.base import CurveBackend
from zkverify.errors import UnsupportedCurve


class CurveId(str, Enum):
    BN254 = "bn254"


_ALIASES: Dict[str, str] = {
    "bn254": CurveId.BN254.value,
    "bn128": CurveId.BN254.value,
    "alt_bn128": CurveId.BN254.value,
    "altbn128": CurveId.BN254.value,
}


def normalize_curve_id(curve: Union[str, CurveId]) -> CurveId:
    """Accept common aliases, return the canonical `CurveId`."""
    if isinstance(curve, CurveId):
        return curve
    if not isinstance(curve, str):
        raise UnsupportedCurve(repr(curve))
    key = curve.strip().lower().replace("-", "_")
    try:
        return CurveId(_ALIASES[key])
    except KeyError:
        raise UnsupportedCurve(curve) from None


@dataclass(frozen=True)
class BackendSpec:
    """Declarative binding of a curve → module:class."""

    curve: CurveId
    module: str
    cls: str
    description: str = ""


_SPECS: Dict[CurveId, BackendSpec] = {}
_INSTANCES: Dict[CurveId, CurveBackend] = {}
_LOCK = RLock()


def register_backend(spec: BackendSpec, *, overwrite: bool = False) -> None:
    with _LOCK:
        if spec.curve in _SPECS and not overwrite:
            return
        _SPECS[spec.curve] = spec
        _INSTANCES.pop(spec.curve, None)


def get_backend(curve: Union[str, CurveId] = CurveId.BN254) -> CurveBackend:
    """Return the (cached) backend instance for `curve`."""
    cid = normalize_curve_id(curve)
    with _LOCK:
        inst = _INSTANCES.get(cid)
        if inst is not None:
            return inst
        spec = _SPECS.get(cid)
        if spec is None:
            raise UnsupportedCurve(cid.value)
        mod = import_module(spec.module)
        inst = getattr(mod, spec.cls)()
        if not isinstance(inst, CurveBackend):
            raise TypeError(f"{spec.module}.{spec.cls} is not a CurveBackend")
        _INSTANCES[cid] = inst
        return inst


def list_curves() -> List[str]:
    with _LOCK:
        return sorted(c.value for c in _SPECS)


def _register_defaults() -> None:
    defaults: Tuple[BackendSpec, ...] = (
        BackendSpec(
            curve=CurveId.BN254,
            module="zkverify.curves.bn254",
            cls="BN254Backend",
            description="BN254 / alt_bn128 via py_ecc.optimized_bn128",
        ),
    )
    for spec in defaults:
        register_backend(spec)


_register_defaults()


__all__ = [
    "CurveBackend",
    "CurveId",
    "BackendSpec",
    "normalize_curve_id",
    "register_backend",
    "get_backend",
    "list_curves",
]
