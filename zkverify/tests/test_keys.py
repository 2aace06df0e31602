import pytest

from zkverify.errors import InvalidEncoding, VerificationError
from zkverify.keys import (PreparedVerifyingKey, decode_verifying_key, encode_verifying_key,
                           make_verifying_key, prepare_verifying_key)
from zkverify.tests import BN254, make_circuit, prepared

G1_INF = b"\x00" * 31 + b"\x40"


def test_vk_round_trip():
    c = make_circuit(2)
    assert len(c.vk_bytes) == 32 + 3 * 64 + 8 + 3 * 32
    vk = decode_verifying_key(c.vk_bytes)
    assert vk.num_public_inputs == 2
    assert encode_verifying_key(vk) == c.vk_bytes
    assert BN254.g1_eq(vk.alpha_g1, c.vk.alpha_g1)
    assert BN254.g2_eq(vk.delta_g2, c.vk.delta_g2)


def test_vk_count_is_little_endian_u64():
    c = make_circuit(2)
    count = c.vk_bytes[224:232]
    assert count == (3).to_bytes(8, "little")


@pytest.mark.parametrize("cut", [1, 32, 100, 232])
def test_vk_rejects_truncation(cut):
    data = make_circuit(2).vk_bytes
    with pytest.raises(InvalidEncoding):
        decode_verifying_key(data[:-cut])


def test_vk_rejects_trailing_bytes_and_bad_count():
    data = make_circuit(2).vk_bytes
    with pytest.raises(InvalidEncoding):
        decode_verifying_key(data + b"\x00")
    with pytest.raises(InvalidEncoding):
        decode_verifying_key(data[:224] + (4).to_bytes(8, "little") + data[232:])
    with pytest.raises(InvalidEncoding):
        decode_verifying_key(data[:224] + (0).to_bytes(8, "little"))


def test_vk_rejects_invalid_point():
    data = bytearray(make_circuit(2).vk_bytes)
    # alpha: both flags set
    data[31] |= 0xC0
    with pytest.raises(InvalidEncoding):
        decode_verifying_key(bytes(data))


def test_make_verifying_key_needs_bases():
    g, h = BN254.g1_generator(), BN254.g2_generator()
    with pytest.raises(InvalidEncoding):
        make_verifying_key(g, h, h, h, [])


def test_vk_allows_identity_bases():
    g, h = BN254.g1_generator(), BN254.g2_generator()
    vk = make_verifying_key(g, h, h, h, [BN254.g1_identity()])
    data = encode_verifying_key(vk)
    assert data.endswith((1).to_bytes(8, "little") + G1_INF)
    assert encode_verifying_key(decode_verifying_key(data)) == data


# --- prepared key ------------------------------------------------------------


@pytest.mark.slow
def test_prepare_is_deterministic():
    c = make_circuit(1, seed=3)
    first = prepare_verifying_key(c.vk).as_serialized()
    second = prepare_verifying_key(decode_verifying_key(c.vk_bytes)).as_serialized()
    assert first == second


def test_prepared_buffers_layout():
    bufs = prepared(2)
    assert len(bufs) == 4
    assert len(bufs[0]) == 3 * 32
    assert bufs[0] == make_circuit(2).vk_bytes[232:]
    assert len(bufs[1]) == 384


def test_prepared_round_trip():
    bufs = prepared(2)
    pvk = PreparedVerifyingKey.deserialize(*bufs)
    assert pvk.num_public_inputs == 2
    assert pvk.curve == "bn254"
    assert pvk.as_serialized() == list(bufs)


def test_prepared_rejects_bad_abc_buffer():
    bufs = list(prepared(2))
    with pytest.raises(InvalidEncoding):
        PreparedVerifyingKey.deserialize(b"", *bufs[1:])
    with pytest.raises(InvalidEncoding):
        PreparedVerifyingKey.deserialize(bufs[0] + b"\x00", *bufs[1:])


def test_prepared_rejects_bad_gt_and_blobs():
    b0, b1, b2, b3 = prepared(2)
    with pytest.raises(InvalidEncoding):
        PreparedVerifyingKey.deserialize(b0, b1[:-32], b2, b3)
    with pytest.raises(VerificationError):
        PreparedVerifyingKey.deserialize(b0, b1, b2[:-1], b3)
    with pytest.raises(VerificationError):
        PreparedVerifyingKey.deserialize(b0, b1, b2, b"XXXX" + b3[4:])
