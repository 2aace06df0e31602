"""
zkverify command line tool.

Subcommands
-----------
  prepare VK                     prepare a compressed verifying key
                                 → PreparedKeyRecord JSON
  verify PVK --inputs --proof    verify one proof; exit 0 valid, 1 invalid,
                                 2 malformed input
  verify-batch PVK REQUESTS      verify a JSON list of VerifyRequest records
                                 across a process pool
  convert-snarkjs --vk/--proof/--public
                                 snarkjs JSON → canonical hex
  bench PVK --inputs --proof     timing report (JSON)

Byte arguments (VK, --inputs, --proof) are either a path to a file holding
raw bytes or hex text, or an inline hex string ("" for no public inputs).

Examples
--------
  zkverify prepare vk.bin -o pvk.json
  zkverify verify pvk.json --inputs 0x0300..00 --proof proof.bin
  zkverify verify-batch pvk.json requests.json --workers 4
  zkverify convert-snarkjs --vk vk.json --proof proof.json --public public.json
"""

from __future__ import annotations

import argparse
import json
import os
import string
import sys
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from zkverify import logging as zlog
from zkverify.api import (SCALAR_SIZE, prepare_pvk_bytes, verify_groth16_in_bytes,
                          verify_with_prepared_key)
from zkverify.bench import run_bench
from zkverify.codec import Codec
from zkverify.config import VerifierConfig, load_config
from zkverify.curves import get_backend, normalize_curve_id
from zkverify.errors import InvalidEncoding, ZKVerifyError
from zkverify.keys import PreparedVerifyingKey
from zkverify.proof import decode_proof
from zkverify.snarkjs import (proof_bytes_from_snarkjs, public_inputs_from_snarkjs,
                              vk_bytes_from_snarkjs)
from zkverify.types import (PreparedKeyRecord, VerifyOutcome, VerifyRequest, decode_json,
                            encode_json, hex_to_bytes)

log = zlog.get_logger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_MALFORMED = 2

_HEX = frozenset(string.hexdigits)


# ------------- helpers -------------


def _read_blob(value: str) -> bytes:
    """File path (raw or hex content) or inline hex."""
    if value and os.path.isfile(value):
        data = Path(value).read_bytes()
        try:
            text = data.decode("ascii").strip()
        except UnicodeDecodeError:
            return data
        body = text[2:] if text[:2].lower() == "0x" else text
        if body and len(body) % 2 == 0 and set(body) <= _HEX:
            return bytes.fromhex(body)
        return data
    return hex_to_bytes(value)


def _write_out(data: bytes, out: Optional[str]) -> None:
    if out:
        p = Path(out)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data + b"\n")
    else:
        sys.stdout.write(data.decode("utf-8") + "\n")
        sys.stdout.flush()


def _load_record(path: str, cfg: VerifierConfig) -> PreparedKeyRecord:
    rec = decode_json(Path(path).read_bytes(), PreparedKeyRecord)
    curve = normalize_curve_id(rec.curve).value
    if curve != cfg.curve:
        raise InvalidEncoding("prepared key is for another curve", expected=cfg.curve, actual=curve)
    g1_size = get_backend(curve).g1_size
    abc_len = len(hex_to_bytes(rec.vk_gamma_abc_g1))
    if abc_len % g1_size != 0 or abc_len // g1_size - 1 != rec.num_public_inputs:
        raise InvalidEncoding(
            "num_public_inputs does not match vk_gamma_abc_g1",
            declared=rec.num_public_inputs,
            actual=abc_len // g1_size - 1,
        )
    return rec


def _check_input_cap(inputs: bytes, cfg: VerifierConfig) -> None:
    n = len(inputs) // SCALAR_SIZE
    if n > cfg.max_public_inputs:
        raise InvalidEncoding(
            "too many public inputs", limit=cfg.max_public_inputs, actual=n
        )


# Prepared key of the current process; set once per worker by _init_worker.
_WORKER_KEY: Optional[PreparedVerifyingKey] = None


def _init_worker(buffers: Sequence[bytes], curve: str) -> None:
    global _WORKER_KEY
    _WORKER_KEY = PreparedVerifyingKey.deserialize(*buffers, curve=curve)


def _verify_request(max_inputs: int, req: VerifyRequest) -> Dict[str, Any]:
    # Runs in worker processes: returns plain data, never raises ZKVerifyError.
    key = _WORKER_KEY
    if key is None:
        raise RuntimeError("worker has no prepared key")
    try:
        raw = req.input_bytes()
        if len(raw) // SCALAR_SIZE > max_inputs:
            raise InvalidEncoding("too many public inputs", limit=max_inputs)
        codec = Codec(key.backend)
        inputs = codec.decode_scalar_sequence(raw, SCALAR_SIZE)
        proof = decode_proof(req.proof_bytes(), curve=key.curve)
        ok = verify_with_prepared_key(key, inputs, proof)
        return {"id": req.id, "ok": ok, "error": None}
    except ZKVerifyError as e:
        return {"id": req.id, "ok": False, "error": e.to_dict()}


# ------------- subcommands -------------


def cmd_prepare(args: argparse.Namespace, cfg: VerifierConfig) -> int:
    vk_bytes = _read_blob(args.vk)
    buffers = prepare_pvk_bytes(vk_bytes, curve=cfg.curve)
    rec = PreparedKeyRecord.from_buffers(
        buffers, curve=cfg.curve, g1_size=get_backend(cfg.curve).g1_size, vk_bytes=vk_bytes
    )
    log.info("prepared verifying key", extra={"num_public_inputs": rec.num_public_inputs})
    _write_out(encode_json(rec), args.out)
    return EXIT_VALID


def cmd_verify(args: argparse.Namespace, cfg: VerifierConfig) -> int:
    rec = _load_record(args.pvk, cfg)
    inputs = _read_blob(args.inputs)
    _check_input_cap(inputs, cfg)
    ok = verify_groth16_in_bytes(*rec.to_buffers(), inputs, _read_blob(args.proof), curve=rec.curve)
    print("valid" if ok else "invalid")
    return EXIT_VALID if ok else EXIT_INVALID


def cmd_verify_batch(args: argparse.Namespace, cfg: VerifierConfig) -> int:
    global _WORKER_KEY
    rec = _load_record(args.pvk, cfg)
    requests = decode_json(Path(args.requests).read_bytes(), List[VerifyRequest])
    buffers = rec.to_buffers()
    workers = cfg.max_workers

    # Decode in the parent first so a bad key fails the command, not the pool.
    _WORKER_KEY = PreparedVerifyingKey.deserialize(*buffers, curve=rec.curve)
    try:
        if workers <= 1 or len(requests) <= 1:
            results = [_verify_request(cfg.max_public_inputs, r) for r in requests]
        else:
            with ProcessPoolExecutor(
                max_workers=workers, initializer=_init_worker, initargs=(buffers, rec.curve)
            ) as pool:
                futs = [pool.submit(_verify_request, cfg.max_public_inputs, r) for r in requests]
                results = [f.result() for f in futs]
    finally:
        _WORKER_KEY = None

    outcomes = [VerifyOutcome(ok=r["ok"], id=r["id"], error=r["error"]) for r in results]
    log.info(
        "batch verified",
        extra={"requests": len(outcomes), "valid": sum(1 for o in outcomes if o.ok), "workers": workers},
    )
    _write_out(encode_json(outcomes), args.out)
    if any(o.error is not None for o in outcomes):
        return EXIT_MALFORMED
    return EXIT_VALID if all(o.ok for o in outcomes) else EXIT_INVALID


def cmd_convert_snarkjs(args: argparse.Namespace, cfg: VerifierConfig) -> int:
    if not (args.vk or args.proof or args.public):
        raise InvalidEncoding("nothing to convert: pass --vk, --proof or --public")
    out: Dict[str, str] = {}
    if args.vk:
        out["vk"] = vk_bytes_from_snarkjs(args.vk, curve=cfg.curve).hex()
    if args.proof:
        out["proof"] = proof_bytes_from_snarkjs(args.proof, curve=cfg.curve).hex()
    if args.public:
        out["public_inputs"] = public_inputs_from_snarkjs(args.public, curve=cfg.curve).hex()
    _write_out(json.dumps(out, indent=2, sort_keys=True).encode("utf-8"), args.out)
    return EXIT_VALID


def cmd_bench(args: argparse.Namespace, cfg: VerifierConfig) -> int:
    rec = _load_record(args.pvk, cfg)
    inputs = _read_blob(args.inputs)
    _check_input_cap(inputs, cfg)
    report = run_bench(
        rec.to_buffers(),
        inputs,
        _read_blob(args.proof),
        curve=rec.curve,
        iters=max(0, args.iters),
        warmup=max(0, args.warmup),
    )
    data = json.dumps(report, indent=2 if args.pretty else None, sort_keys=args.pretty)
    _write_out(data.encode("utf-8"), args.out)
    return EXIT_VALID


# ------------- CLI -------------


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="zkverify", description="Groth16 / BN254 proof verifier")
    ap.add_argument("--curve", help="curve id (default: $ZKVERIFY_CURVE or bn254)")
    ap.add_argument("--log-level", help="DEBUG | INFO | WARNING | ERROR")
    ap.add_argument("--log-format", choices=["text", "json"])
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("prepare", help="prepare a compressed verifying key")
    p.add_argument("vk", help="verifying key file or hex")
    p.add_argument("-o", "--out", help="output JSON path (default: stdout)")
    p.set_defaults(func=cmd_prepare)

    p = sub.add_parser("verify", help="verify one proof")
    p.add_argument("pvk", help="PreparedKeyRecord JSON")
    p.add_argument("--inputs", required=True, help="public inputs file or hex")
    p.add_argument("--proof", required=True, help="proof file or hex")
    p.set_defaults(func=cmd_verify)

    p = sub.add_parser("verify-batch", help="verify many proofs against one key")
    p.add_argument("pvk", help="PreparedKeyRecord JSON")
    p.add_argument("requests", help="JSON list of {public_inputs, proof, id}")
    p.add_argument("--workers", type=int, help="worker processes (default: $ZKVERIFY_MAX_WORKERS)")
    p.add_argument("-o", "--out", help="output JSON path (default: stdout)")
    p.set_defaults(func=cmd_verify_batch)

    p = sub.add_parser("convert-snarkjs", help="snarkjs JSON → canonical hex")
    p.add_argument("--vk", help="snarkjs vk.json")
    p.add_argument("--proof", help="snarkjs proof.json")
    p.add_argument("--public", help="snarkjs public.json")
    p.add_argument("-o", "--out", help="output JSON path (default: stdout)")
    p.set_defaults(func=cmd_convert_snarkjs)

    p = sub.add_parser("bench", help="verification micro-bench")
    p.add_argument("pvk", help="PreparedKeyRecord JSON")
    p.add_argument("--inputs", required=True, help="public inputs file or hex")
    p.add_argument("--proof", required=True, help="proof file or hex")
    p.add_argument("--iters", type=int, default=10, help="measured iterations (default: 10)")
    p.add_argument("--warmup", type=int, default=1, help="unmeasured warmup iterations (default: 1)")
    p.add_argument("--pretty", action="store_true", help="pretty-print JSON")
    p.add_argument("-o", "--out", help="output JSON path (default: stdout)")
    p.set_defaults(func=cmd_bench)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(
            {
                "curve": args.curve,
                "log_level": args.log_level,
                "log_format": args.log_format,
                "max_workers": getattr(args, "workers", None),
            }
        )
        zlog.configure(json=cfg.log_format == "json", level=cfg.log_level)
        return args.func(args, cfg)
    except ZKVerifyError as e:
        log.debug("command failed", extra={"code": e.code})
        sys.stderr.write(json.dumps(e.to_dict(), sort_keys=True) + "\n")
        return EXIT_MALFORMED
    except OSError as e:
        sys.stderr.write(f"error: {e}\n")
        return EXIT_MALFORMED


if __name__ == "__main__":
    raise SystemExit(main())
