import base64
import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from _util import FIX, read_bytes
from keyident.contracts import KeyFormat
from keyident.errors import MalformedKeyData, UnsupportedAlgorithm
from keyident.formats.sshcom import BEGIN, END, MAGIC
from keyident.identifier import identify
from keyident.wire import pack_string, pack_u32

RSA_TYPE = b"if-modn{sign{rsa-pkcs1-sha1},encrypt{rsa-pkcs1v2-oaep}}"
DSA_TYPE = b"dl-modp{sign{dsa-nist-sha1},dh{plain}}"


def _bitcount_mpint(value: int) -> bytes:
    bits = value.bit_length()
    return pack_u32(bits) + value.to_bytes((bits + 7) // 8, "big")


def _sshcom(key_type: bytes, cipher: bytes, keydata: bytes, magic: int = MAGIC, comment=b'"built in test"') -> bytes:
    rest = pack_string(key_type) + pack_string(cipher) + pack_string(keydata)
    blob = pack_u32(magic) + pack_u32(8 + len(rest)) + rest
    b64 = base64.b64encode(blob)
    body = b"\n".join(b64[i : i + 70] for i in range(0, len(b64), 70))
    return BEGIN + b"\nComment: " + comment + b"\n" + body + b"\n" + END + b"\n"


def _clear_rsa(key: rsa.RSAPrivateKey) -> bytes:
    n = key.private_numbers()
    inner = b"".join(
        _bitcount_mpint(v)
        for v in (n.public_numbers.e, n.d, n.public_numbers.n, n.iqmp, n.p, n.q)
    )
    return pack_string(inner)


def _openssh_sha256(pub) -> str:
    line = pub.public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
    digest = hashlib.sha256(base64.b64decode(line.split()[1])).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def test_sshcom_encrypted_fixture():
    desc = identify(read_bytes(FIX / "sshcom" / "rsa_enc.key"))
    assert desc.format is KeyFormat.SSHCOM
    assert desc.type == "ssh-rsa"
    assert desc.encrypted is True
    assert desc.bits is None
    assert desc.fingerprint_md5 is None and desc.fingerprint_sha256 is None
    assert desc.comment == "rsa-key-20201019 test@keyident, exported from a SSH.com style agent"


def test_sshcom_unencrypted_rsa_exposes_public_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    desc = identify(_sshcom(RSA_TYPE, b"none", _clear_rsa(key)))
    assert desc.encrypted is False
    assert desc.bits == 2048
    assert desc.fingerprint_sha256 == _openssh_sha256(key.public_key())
    assert desc.comment == "built in test"


def test_sshcom_unencrypted_dsa_exposes_public_key():
    p, q, g, y = (1 << 1023) | 0x2F, (1 << 159) | 0x11, 0x1234567, 0xABCDEF
    inner = pack_u32(0) + b"".join(_bitcount_mpint(v) for v in (p, g, q, y, 0x42))
    desc = identify(_sshcom(DSA_TYPE, b"none", pack_string(inner)))
    assert desc.type == "ssh-dss"
    assert desc.bits == 1024
    assert desc.fingerprint_md5 is not None


def test_sshcom_cipher_declared_means_encrypted_even_if_body_is_clear():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    desc = identify(_sshcom(RSA_TYPE, b"3des-cbc", _clear_rsa(key)))
    assert desc.encrypted is True
    assert desc.bits is None


def test_sshcom_bad_magic():
    with pytest.raises(MalformedKeyData, match="magic"):
        identify(_sshcom(RSA_TYPE, b"none", b"", magic=0x12345678))


def test_sshcom_unsupported_key_type():
    with pytest.raises(UnsupportedAlgorithm):
        identify(_sshcom(b"ec-modp{sign{ecdsa}}", b"3des-cbc", b"\x00" * 8))


def test_sshcom_dsa_bad_prefix():
    inner = pack_u32(7) + _bitcount_mpint(5)
    with pytest.raises(MalformedKeyData, match="prefix"):
        identify(_sshcom(DSA_TYPE, b"none", pack_string(inner)))


def test_sshcom_truncated_integer():
    inner = pack_u32(2048) + b"\x01\x02"
    with pytest.raises(MalformedKeyData, match="truncated"):
        identify(_sshcom(RSA_TYPE, b"none", pack_string(inner)))


def test_sshcom_declared_length_too_large():
    data = read_bytes(FIX / "sshcom" / "rsa_enc.key")
    lines = data.splitlines()
    blob = bytearray(base64.b64decode(b"".join(lines[3:-1])))
    blob[4:8] = pack_u32(len(blob) + 100)
    b64 = base64.b64encode(bytes(blob))
    forged = b"\n".join([lines[0], b"\n".join(b64[i : i + 70] for i in range(0, len(b64), 70)), lines[-1]])
    with pytest.raises(MalformedKeyData, match="exceeds"):
        identify(forged)


def test_sshcom_zero_modulus():
    inner = b"".join(_bitcount_mpint(v) for v in (65537, 3)) + pack_u32(0)
    with pytest.raises(MalformedKeyData, match="RSA modulus"):
        identify(_sshcom(RSA_TYPE, b"none", pack_string(inner)))
