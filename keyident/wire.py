"""SSH wire encoding (RFC 4251 section 5) and the public key blob built on it."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .errors import MalformedKeyData, UnsupportedAlgorithm
from .keytypes import SSH_DSS, SSH_ED25519, SSH_RSA, curve_for_type

Param = Union[int, bytes, str]


def read_u32(buf: bytes, i: int) -> Tuple[int, int]:
    if i + 4 > len(buf):
        raise MalformedKeyData("truncated uint32 field")
    return int.from_bytes(buf[i : i + 4], "big"), i + 4


def read_string(buf: bytes, i: int) -> Tuple[bytes, int]:
    ln, i = read_u32(buf, i)
    if i + ln > len(buf):
        raise MalformedKeyData(f"truncated string field ({ln} bytes declared)")
    return buf[i : i + ln], i + ln


def read_mpint(buf: bytes, i: int) -> Tuple[int, int]:
    raw, i = read_string(buf, i)
    value = int.from_bytes(raw, "big", signed=True)
    if value < 0:
        raise MalformedKeyData("negative mpint in key data")
    return value, i


def read_text(buf: bytes, i: int) -> Tuple[str, int]:
    raw, i = read_string(buf, i)
    try:
        return raw.decode("ascii"), i
    except UnicodeDecodeError:
        raise MalformedKeyData("non-ASCII name field") from None


def positive_int(value: int, name: str) -> int:
    value = int(value)
    if value <= 0:
        raise MalformedKeyData(f"{name} must be positive")
    return value


def pack_u32(value: int) -> bytes:
    return value.to_bytes(4, "big")


def pack_string(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        value = value.encode("ascii")
    return pack_u32(len(value)) + value


def pack_mpint(value: int) -> bytes:
    if value < 0:
        raise MalformedKeyData("negative mpint in public key")
    if value == 0:
        return pack_string(b"")
    # one spare bit keeps the sign bit clear for positive values
    return pack_string(value.to_bytes((value.bit_length() + 8) // 8, "big"))


@dataclass(frozen=True)
class PublicKeyBlob:
    """A public key as SSH puts it on the wire.

    ``params`` follow the wire order of each algorithm:
    RSA ``(e, n)``, DSA ``(p, q, g, y)``, ECDSA ``(curve_name, point)``,
    Ed25519 ``(public,)``.
    """

    key_type: str
    params: Tuple[Param, ...]

    @classmethod
    def from_wire(cls, blob: bytes) -> "PublicKeyBlob":
        key_type, i = read_text(blob, 0)
        if key_type == SSH_RSA:
            e, i = read_mpint(blob, i)
            n, i = read_mpint(blob, i)
            params: Tuple[Param, ...] = (e, n)
        elif key_type == SSH_DSS:
            p, i = read_mpint(blob, i)
            q, i = read_mpint(blob, i)
            g, i = read_mpint(blob, i)
            y, i = read_mpint(blob, i)
            params = (p, q, g, y)
        elif key_type == SSH_ED25519:
            pub, i = read_string(blob, i)
            if len(pub) != 32:
                raise MalformedKeyData(f"ed25519 public key is {len(pub)} bytes, expected 32")
            params = (pub,)
        elif curve_for_type(key_type) is not None:
            curve = curve_for_type(key_type)
            name, i = read_text(blob, i)
            if name != curve.name:
                raise MalformedKeyData(f"curve {name!r} does not match key type {key_type}")
            point, i = read_string(blob, i)
            params = (name, point)
        else:
            raise UnsupportedAlgorithm(f"unsupported public key algorithm: {key_type!r}")
        if i != len(blob):
            raise MalformedKeyData("trailing bytes after public key")
        return cls(key_type, params)

    def to_wire(self) -> bytes:
        out = [pack_string(self.key_type)]
        for p in self.params:
            out.append(pack_mpint(p) if isinstance(p, int) else pack_string(p))
        return b"".join(out)
