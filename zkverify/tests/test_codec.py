import pytest
from hypothesis import given, settings, strategies as st

from zkverify import codec
from zkverify.codec import FLAG_INFINITY, FLAG_Y_LARGEST, Codec
from zkverify.errors import InputLengthWrong, InvalidEncoding
from zkverify.tests import BN254, R, non_residue_x_g1, off_subgroup_x_g2

P = BN254.field_modulus

G2_X = (
    10857046999023057135944570762232829481370756359578518086990519993285655852781,
    11559732032986387107991004021392285783925812861821192530917403151452391805634,
)
G2_Y = (
    8495653923123431417604973247489272438418190587263600148770280649306958101930,
    4082367875863433681332203403145435568316851327593401208105741076214120093531,
)


def _le(v: int, n: int = 32) -> bytes:
    return v.to_bytes(n, "little")


# --- scalars -----------------------------------------------------------------


def test_scalar_known_answers():
    assert codec.decode_scalar(_le(0)) == 0
    assert codec.decode_scalar(_le(R - 1)) == R - 1
    assert codec.encode_scalar(3) == b"\x03" + b"\x00" * 31


def test_scalar_rejects_unreduced_and_wrong_length():
    with pytest.raises(InvalidEncoding):
        codec.decode_scalar(_le(R))
    with pytest.raises(InvalidEncoding):
        codec.decode_scalar(b"\xff" * 32)
    with pytest.raises(InvalidEncoding):
        codec.decode_scalar(b"\x01" * 31)
    with pytest.raises(InvalidEncoding):
        codec.encode_scalar(R)
    with pytest.raises(InvalidEncoding):
        codec.encode_scalar(-1)


def test_scalar_sequence_chunks_and_length_check():
    data = _le(1) + _le(2) + _le(R - 1)
    assert codec.decode_scalar_sequence(data) == [1, 2, R - 1]
    assert codec.decode_scalar_sequence(b"") == []

    with pytest.raises(InputLengthWrong) as ei:
        codec.decode_scalar_sequence(b"\x00" * 33)
    assert ei.value.expected_multiple == 32
    assert ei.value == InputLengthWrong(32)


@pytest.mark.parametrize("size", [0, -32, 16, 33])
def test_scalar_sequence_rejects_other_element_sizes(size):
    with pytest.raises(InvalidEncoding) as ei:
        codec.decode_scalar_sequence(b"", size)
    assert ei.value.data == {"expected": 32, "actual": size}


@given(v=st.integers(min_value=0, max_value=R - 1))
def test_scalar_round_trip_property(v):
    enc = codec.encode_scalar(v)
    assert len(enc) == 32
    assert codec.decode_scalar(enc) == v


# --- G1 ----------------------------------------------------------------------


def test_g1_known_answers():
    g = BN254.g1_generator()
    # generator (1, 2): y is the smaller root
    assert codec.encode_point_g1(g) == b"\x01" + b"\x00" * 31
    # -generator (1, p-2): same x, largest-root flag set
    assert codec.encode_point_g1(BN254.g1_neg(g)) == b"\x01" + b"\x00" * 30 + bytes([FLAG_Y_LARGEST])
    assert codec.encode_point_g1(BN254.g1_identity()) == b"\x00" * 31 + bytes([FLAG_INFINITY])


def test_g1_round_trip():
    g = BN254.g1_generator()
    for P1 in (g, BN254.g1_neg(g), BN254.g1_mul(g, 5), BN254.g1_mul(g, R - 7), BN254.g1_identity()):
        enc = codec.encode_point_g1(P1)
        dec = codec.decode_point_g1(enc)
        assert BN254.g1_eq(dec, P1)
        assert codec.encode_point_g1(dec) == enc


@given(k=st.integers(min_value=0, max_value=R - 1))
@settings(max_examples=50, deadline=None)
def test_g1_round_trip_property(k):
    P1 = BN254.g1_mul(BN254.g1_generator(), k)
    enc = codec.encode_point_g1(P1)
    dec = codec.decode_point_g1(enc)
    assert BN254.g1_eq(dec, P1)
    assert codec.encode_point_g1(dec) == enc


def test_g1_decode_picks_root_by_flag():
    g = BN254.g1_generator()
    assert BN254.g1_to_affine(codec.decode_point_g1(b"\x01" + b"\x00" * 31)) == (1, 2)
    neg = codec.decode_point_g1(b"\x01" + b"\x00" * 30 + b"\x80")
    assert BN254.g1_eq(neg, BN254.g1_neg(g))


@pytest.mark.parametrize(
    "data",
    [
        b"\x00" * 31,  # short
        b"\x00" * 33,  # long
        b"\x01" + b"\x00" * 30 + bytes([FLAG_INFINITY | FLAG_Y_LARGEST]),  # both flags
        b"\x01" + b"\x00" * 30 + bytes([FLAG_INFINITY]),  # infinity with nonzero x
        _le(P),  # x == p
        _le(P + 1),
    ],
)
def test_g1_rejects_malformed(data):
    with pytest.raises(InvalidEncoding):
        codec.decode_point_g1(data)


def test_g1_rejects_x_without_curve_point():
    x = non_residue_x_g1()
    with pytest.raises(InvalidEncoding):
        codec.decode_point_g1(_le(x))


def test_g1_sequence():
    g = BN254.g1_generator()
    pts = [g, BN254.g1_mul(g, 2), BN254.g1_identity()]
    c = Codec(BN254)
    data = c.encode_g1_sequence(pts)
    assert len(data) == 96
    out = codec.decode_g1_sequence(data)
    assert all(BN254.g1_eq(a, b) for a, b in zip(out, pts))
    with pytest.raises(InvalidEncoding):
        codec.decode_g1_sequence(data + b"\x00")


# --- G2 ----------------------------------------------------------------------


def test_g2_known_answer_generator():
    assert BN254.g2_to_affine(BN254.g2_generator()) == (G2_X, G2_Y)
    expected = _le(G2_X[0]) + _le(G2_X[1])
    assert codec.encode_point_g2(BN254.g2_generator()) == expected

    neg = codec.encode_point_g2(BN254.g2_neg(BN254.g2_generator()))
    assert neg[:-1] == expected[:-1]
    assert neg[-1] == expected[-1] | FLAG_Y_LARGEST


def test_g2_identity_encoding():
    enc = codec.encode_point_g2(BN254.g2_identity())
    assert enc == b"\x00" * 63 + bytes([FLAG_INFINITY])
    assert BN254.g2_is_identity(codec.decode_point_g2(enc))


def test_g2_round_trip():
    h = BN254.g2_generator()
    for Q in (h, BN254.g2_neg(h), BN254.g2_mul(h, 9), BN254.g2_mul(h, R - 2)):
        enc = codec.encode_point_g2(Q)
        dec = codec.decode_point_g2(enc)
        assert BN254.g2_eq(dec, Q)
        assert codec.encode_point_g2(dec) == enc


@given(k=st.integers(min_value=0, max_value=R - 1))
@settings(max_examples=20, deadline=None)
def test_g2_round_trip_property(k):
    Q = BN254.g2_mul(BN254.g2_generator(), k)
    enc = codec.encode_point_g2(Q)
    dec = codec.decode_point_g2(enc)
    assert BN254.g2_eq(dec, Q)
    assert codec.encode_point_g2(dec) == enc


@pytest.mark.parametrize(
    "data",
    [
        b"\x00" * 63,
        b"\x00" * 65,
        _le(G2_X[0]) + _le(G2_X[1])[:-1] + bytes([_le(G2_X[1])[-1] | FLAG_INFINITY | FLAG_Y_LARGEST]),
        _le(G2_X[0]) + _le(G2_X[1])[:-1] + bytes([_le(G2_X[1])[-1] | FLAG_INFINITY]),
        _le(P) + _le(0),
        _le(0) + _le(P),
    ],
)
def test_g2_rejects_malformed(data):
    with pytest.raises(InvalidEncoding):
        codec.decode_point_g2(data)


def test_g2_rejects_point_outside_subgroup():
    x = off_subgroup_x_g2()
    data = _le(x[0]) + _le(x[1])
    with pytest.raises(InvalidEncoding):
        codec.decode_point_g2(data)
    with pytest.raises(InvalidEncoding):
        codec.decode_point_g2(data[:-1] + bytes([data[-1] | FLAG_Y_LARGEST]))


def test_error_carries_code():
    with pytest.raises(InvalidEncoding) as ei:
        codec.decode_point_g1(b"")
    d = ei.value.to_dict()
    assert d["code"] == "ZK/INVALID_ENCODING"
    assert d["data"] == {"expected": 32, "actual": 0}
