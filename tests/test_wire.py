import base64

import pytest

from _util import FIX, read_bytes
from keyident.bits import bit_length
from keyident.errors import MalformedKeyData, UnsupportedAlgorithm
from keyident.fingerprint import fingerprints, fp_md5, fp_sha256
from keyident.wire import PublicKeyBlob, pack_mpint, pack_string, read_mpint, read_string, read_u32


def _pub_blob(name: str) -> bytes:
    return base64.b64decode(read_bytes(FIX / "openssh" / name).split()[1])


@pytest.mark.parametrize(
    "value, encoded",
    [
        (0, b"\x00\x00\x00\x00"),
        (0x7F, b"\x00\x00\x00\x01\x7f"),
        (0x80, b"\x00\x00\x00\x02\x00\x80"),
        (0x1234, b"\x00\x00\x00\x02\x12\x34"),
    ],
)
def test_pack_mpint(value, encoded):
    assert pack_mpint(value) == encoded
    assert read_mpint(encoded, 0) == (value, len(encoded))


def test_read_mpint_rejects_negative():
    with pytest.raises(MalformedKeyData, match="negative"):
        read_mpint(b"\x00\x00\x00\x01\xff", 0)


def test_readers_are_bounds_checked():
    with pytest.raises(MalformedKeyData, match="truncated"):
        read_u32(b"\x00\x00", 0)
    with pytest.raises(MalformedKeyData, match="truncated"):
        read_string(b"\x00\x00\x00\x10abc", 0)


@pytest.mark.parametrize(
    "name", ["id_rsa.pub", "id_dsa.pub", "id_ed25519.pub", "id_ecdsa256.pub", "id_ecdsa521_enc.pub"]
)
def test_public_blob_reencodes_byte_for_byte(name):
    blob = _pub_blob(name)
    assert PublicKeyBlob.from_wire(blob).to_wire() == blob


def test_public_blob_trailing_bytes():
    with pytest.raises(MalformedKeyData, match="trailing"):
        PublicKeyBlob.from_wire(_pub_blob("id_ed25519.pub") + b"\x00")


def test_public_blob_wrong_ed25519_length():
    with pytest.raises(MalformedKeyData, match="expected 32"):
        PublicKeyBlob.from_wire(pack_string("ssh-ed25519") + pack_string(b"\x01" * 31))


def test_public_blob_curve_mismatch():
    blob = pack_string("ecdsa-sha2-nistp256") + pack_string("nistp384") + pack_string(b"\x04" + b"\x00" * 96)
    with pytest.raises(MalformedKeyData, match="does not match"):
        PublicKeyBlob.from_wire(blob)


def test_public_blob_unknown_algorithm():
    with pytest.raises(UnsupportedAlgorithm):
        PublicKeyBlob.from_wire(pack_string("ssh-foo") + pack_string(b"x"))


@pytest.mark.parametrize(
    "n, bits",
    [
        (0x80, 8),
        (0x7F, 7),
        (1 << 1023, 1024),
        ((1 << 1023) - 1, 1023),
    ],
)
def test_rsa_bits_follow_modulus(n, bits):
    assert bit_length(PublicKeyBlob("ssh-rsa", (65537, n))) == bits


def test_dsa_bits_follow_prime():
    assert bit_length(PublicKeyBlob("ssh-dss", ((1 << 2047) | 1, 7, 2, 5))) == 2048


@pytest.mark.parametrize(
    "key_type, bits",
    [
        ("ssh-ed25519", 256),
        ("ecdsa-sha2-nistp256", 256),
        ("ecdsa-sha2-nistp384", 384),
        ("ecdsa-sha2-nistp521", 521),
    ],
)
def test_fixed_size_algorithms(key_type, bits):
    assert bit_length(PublicKeyBlob(key_type, ())) == bits


def test_bits_unknown_algorithm():
    with pytest.raises(UnsupportedAlgorithm):
        bit_length(PublicKeyBlob("ssh-foo", (1,)))


def test_fingerprint_shapes():
    md5 = fp_md5(b"")
    sha = fp_sha256(b"")
    assert md5 == "d4:1d:8c:d9:8f:00:b2:04:e9:80:09:98:ec:f8:42:7e"
    assert sha == "SHA256:47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU"
    assert not sha.endswith("=")


def test_fingerprints_of_ed25519_public_key():
    pub = PublicKeyBlob.from_wire(_pub_blob("id_ed25519.pub"))
    assert fingerprints(pub) == (
        "80:3f:e5:5f:cd:b5:f8:7e:8c:09:7e:08:2d:9b:c0:d9",
        "SHA256:a9RqOIhV9m/59cmLwN4A4tKZ9Oc5y4NUzoEhkvC3Aos",
    )


def test_pack_mpint_rejects_negative():
    with pytest.raises(MalformedKeyData, match="negative"):
        pack_mpint(-1)


@pytest.mark.parametrize(
    "blob",
    [PublicKeyBlob("ssh-rsa", (65537, 0)), PublicKeyBlob("ssh-dss", (0, 7, 2, 5))],
)
def test_bits_never_zero(blob):
    with pytest.raises(MalformedKeyData, match="not positive"):
        bit_length(blob)


def test_zero_modulus_in_openssh_blob():
    blob = pack_string("ssh-rsa") + pack_mpint(65537) + pack_mpint(0)
    with pytest.raises(MalformedKeyData):
        bit_length(PublicKeyBlob.from_wire(blob))
