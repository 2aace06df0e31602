import json

import pytest

from zkverify.errors import InvalidEncoding
from zkverify.snarkjs import proof_bytes_from_snarkjs, public_inputs_from_snarkjs, vk_bytes_from_snarkjs
from zkverify.tests import BN254, R, make_circuit, make_proof, proof_bytes, scalars_to_bytes


def _g1_json(P1):
    aff = BN254.g1_to_affine(P1)
    if aff is None:
        return ["0", "1", "0"]
    return [str(aff[0]), str(aff[1]), "1"]


def _g2_json(Q):
    aff = BN254.g2_to_affine(Q)
    if aff is None:
        return [["0", "0"], ["1", "0"], ["0", "0"]]
    (x0, x1), (y0, y1) = aff
    return [[str(x0), str(x1)], [str(y0), str(y1)], ["1", "0"]]


def _vk_json(circuit):
    vk = circuit.vk
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": vk.num_public_inputs,
        "vk_alpha_1": _g1_json(vk.alpha_g1),
        "vk_beta_2": _g2_json(vk.beta_g2),
        "vk_gamma_2": _g2_json(vk.gamma_g2),
        "vk_delta_2": _g2_json(vk.delta_g2),
        "vk_alphabeta_12": [],
        "IC": [_g1_json(p) for p in vk.gamma_abc_g1],
    }


def _proof_json(circuit, inputs):
    pf = make_proof(circuit, inputs)
    return {
        "pi_a": _g1_json(pf.a),
        "pi_b": _g2_json(pf.b),
        "pi_c": _g1_json(pf.c),
        "protocol": "groth16",
        "curve": "bn128",
    }


def test_vk_conversion_matches_canonical_bytes():
    c = make_circuit(2)
    assert vk_bytes_from_snarkjs(_vk_json(c)) == c.vk_bytes


def test_vk_conversion_from_text_and_file(tmp_path):
    c = make_circuit(2)
    text = json.dumps(_vk_json(c))
    assert vk_bytes_from_snarkjs(text) == c.vk_bytes
    p = tmp_path / "vk.json"
    p.write_text(text, encoding="utf-8")
    assert vk_bytes_from_snarkjs(p) == c.vk_bytes
    assert vk_bytes_from_snarkjs(str(p)) == c.vk_bytes


def test_proof_conversion_flat_and_bundled():
    c = make_circuit(2)
    expected = proof_bytes(c, [3, 5])
    pj = _proof_json(c, [3, 5])
    assert proof_bytes_from_snarkjs(pj) == expected
    bundle = {"proof": pj, "publicSignals": ["3", "0x5"]}
    assert proof_bytes_from_snarkjs(bundle) == expected
    assert public_inputs_from_snarkjs(bundle) == scalars_to_bytes([3, 5])


def test_affine_pairs_and_identity():
    c = make_circuit(2)
    pj = _proof_json(c, [3, 5])
    pj["pi_a"] = pj["pi_a"][:2]
    pj["pi_b"] = pj["pi_b"][:2]
    assert proof_bytes_from_snarkjs(pj) == proof_bytes(c, [3, 5])

    pj["pi_c"] = ["0", "1", "0"]
    out = proof_bytes_from_snarkjs(pj)
    assert out[-32:] == b"\x00" * 31 + b"\x40"


def test_public_signals_list():
    assert public_inputs_from_snarkjs(["1", 2, "0x03"]) == scalars_to_bytes([1, 2, 3])
    assert public_inputs_from_snarkjs("[]") == b""
    with pytest.raises(InvalidEncoding):
        public_inputs_from_snarkjs([str(R)])
    with pytest.raises(InvalidEncoding):
        public_inputs_from_snarkjs(["twelve"])


def test_rejects_off_curve_point():
    c = make_circuit(2)
    vk = _vk_json(c)
    vk["vk_alpha_1"] = ["1", "3", "1"]
    with pytest.raises(InvalidEncoding):
        vk_bytes_from_snarkjs(vk)


def test_rejects_non_affine_and_bad_shapes():
    c = make_circuit(2)
    vk = _vk_json(c)
    vk["vk_alpha_1"] = vk["vk_alpha_1"][:2] + ["2"]
    with pytest.raises(InvalidEncoding):
        vk_bytes_from_snarkjs(vk)

    vk = _vk_json(c)
    del vk["IC"]
    with pytest.raises(InvalidEncoding):
        vk_bytes_from_snarkjs(vk)

    vk = _vk_json(c)
    vk["nPublic"] = 5
    with pytest.raises(InvalidEncoding):
        vk_bytes_from_snarkjs(vk)

    vk = _vk_json(c)
    vk["protocol"] = "plonk"
    with pytest.raises(InvalidEncoding):
        vk_bytes_from_snarkjs(vk)

    with pytest.raises(InvalidEncoding):
        vk_bytes_from_snarkjs("{not json")
