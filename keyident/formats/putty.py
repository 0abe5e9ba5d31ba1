"""PuTTY ``.ppk`` private key files, versions 2 and 3.

Layout (one ``Name: value`` header per line, blocks of base64 lines)::

    PuTTY-User-Key-File-<version>: <algorithm>
    Encryption: none | aes256-cbc
    Comment: <text>
    Public-Lines: <n>
    <n lines of base64>          # SSH wire public key, never encrypted
    Key-Derivation: Argon2id     # v3 + encrypted only, followed by the
    Argon2-Memory: <kbytes>      # Argon2 cost parameters and salt
    ...
    Private-Lines: <n>
    <n lines of base64>          # possibly encrypted, never read here
    Private-MAC: <hex>
"""
import re
from typing import List, Tuple

from ..common import FormatSignature, ParsedKey, b64decode_lines
from ..contracts import KeyFormat
from ..errors import MalformedKeyData
from ..wire import PublicKeyBlob

SIGNATURE = FormatSignature(
    format=KeyFormat.PUTTY,
    markers=(b"PuTTY-User-Key-File-2:", b"PuTTY-User-Key-File-3:"),
    public_always_recoverable=True,
    encryption_flag_in_header=True,
)

_VERSION_LINE = re.compile(r"^PuTTY-User-Key-File-([23]): *(\S+)\s*$")
_ARGON2_FLAVOURS = {"Argon2i", "Argon2d", "Argon2id"}
_ARGON2_INT_FIELDS = ("Argon2-Memory", "Argon2-Passes", "Argon2-Parallelism")


def _field(lines: List[str], i: int, name: str) -> Tuple[str, int]:
    if i >= len(lines):
        raise MalformedKeyData(f"missing {name} header")
    key, sep, value = lines[i].partition(":")
    if not sep or key != name:
        raise MalformedKeyData(f"expected {name} header, found {lines[i][:40]!r}")
    return value.strip(), i + 1


def _int_field(lines: List[str], i: int, name: str) -> Tuple[int, int]:
    value, i = _field(lines, i, name)
    if not value.isdecimal():
        raise MalformedKeyData(f"{name} is not a number: {value!r}")
    return int(value), i


def _block(lines: List[str], i: int, count_name: str) -> Tuple[List[str], int]:
    n, i = _int_field(lines, i, count_name)
    if i + n > len(lines):
        raise MalformedKeyData(f"{count_name} declares {n} lines, file ends early")
    return lines[i : i + n], i + n


def _skip_kdf(lines: List[str], i: int) -> int:
    flavour, i = _field(lines, i, "Key-Derivation")
    if flavour not in _ARGON2_FLAVOURS:
        raise MalformedKeyData(f"unknown key derivation {flavour!r}")
    for name in _ARGON2_INT_FIELDS:
        _, i = _int_field(lines, i, name)
    salt, i = _field(lines, i, "Argon2-Salt")
    try:
        bytes.fromhex(salt)
    except ValueError:
        raise MalformedKeyData("Argon2-Salt is not hex") from None
    return i


def parse(data: bytes) -> ParsedKey:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise MalformedKeyData("PuTTY key file is not valid UTF-8") from None
    lines = [ln.strip() for ln in text.splitlines()]
    lines = lines[next((n for n, ln in enumerate(lines) if ln.startswith("PuTTY-")), 0) :]

    m = _VERSION_LINE.match(lines[0]) if lines else None
    if not m:
        raise MalformedKeyData("malformed PuTTY-User-Key-File line")
    version, algorithm = int(m.group(1)), m.group(2)

    i = 1
    encryption, i = _field(lines, i, "Encryption")
    comment, i = _field(lines, i, "Comment")
    public_lines, i = _block(lines, i, "Public-Lines")
    encrypted = encryption != "none"
    if version == 3 and encrypted:
        i = _skip_kdf(lines, i)
    _, i = _block(lines, i, "Private-Lines")
    _, i = _field(lines, i, "Private-MAC")

    public = PublicKeyBlob.from_wire(b64decode_lines([ln.encode("utf-8") for ln in public_lines]))
    if public.key_type != algorithm:
        raise MalformedKeyData(
            f"header declares {algorithm} but public key is {public.key_type}"
        )
    return ParsedKey(
        format=KeyFormat.PUTTY,
        key_type=public.key_type,
        encrypted=encrypted,
        public=public,
        comment=comment or None,
    )
