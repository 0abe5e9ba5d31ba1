from typing import Dict, List, Tuple

from ..common import FormatSignature, ParsedKey, armored_lines, b64decode_lines
from ..contracts import KeyFormat
from ..errors import MalformedKeyData, UnsupportedAlgorithm
from ..keytypes import SSH_DSS, SSH_RSA
from ..wire import PublicKeyBlob, positive_int, read_string, read_text, read_u32

BEGIN = b"---- BEGIN SSH2 ENCRYPTED PRIVATE KEY ----"
END = b"---- END SSH2 ENCRYPTED PRIVATE KEY ----"
MAGIC = 0x3F6FF9EB

SIGNATURE = FormatSignature(
    format=KeyFormat.SSHCOM,
    markers=(BEGIN,),
    public_always_recoverable=False,
    encryption_flag_in_header=False,
)

# SSH.com spells algorithms as nested scheme descriptions
_KEY_TYPES = (
    ("if-modn{sign{rsa", SSH_RSA),
    ("dl-modp{sign{dsa", SSH_DSS),
)


def _split_headers(lines: List[bytes]) -> Tuple[Dict[str, str], List[bytes]]:
    """RFC 4716 headers: ``Tag: value``, a trailing backslash continues the value."""
    headers: Dict[str, str] = {}
    i = 0
    while i < len(lines) and b":" in lines[i]:
        line = lines[i].decode("utf-8", "replace")
        i += 1
        while line.endswith("\\") and i < len(lines):
            line = line[:-1] + lines[i].decode("utf-8", "replace")
            i += 1
        tag, _, value = line.partition(":")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        headers[tag.strip().lower()] = value
    return headers, lines[i:]


def _key_type(name: str) -> str:
    for prefix, key_type in _KEY_TYPES:
        if name.startswith(prefix):
            return key_type
    raise UnsupportedAlgorithm(f"unsupported SSH.com key type: {name!r}")


def _read_bitcount_mpint(buf: bytes, i: int) -> Tuple[int, int]:
    # SSH.com integers carry their size in bits, not bytes
    bits, i = read_u32(buf, i)
    n = (bits + 7) // 8
    if i + n > len(buf):
        raise MalformedKeyData("truncated integer in key data")
    return int.from_bytes(buf[i : i + n], "big"), i + n


def _public_from_clear(key_type: str, keydata: bytes) -> PublicKeyBlob:
    inner, _ = read_string(keydata, 0)
    if key_type == SSH_RSA:
        i = 0
        e, i = _read_bitcount_mpint(inner, i)
        _d, i = _read_bitcount_mpint(inner, i)
        n, i = _read_bitcount_mpint(inner, i)
        return PublicKeyBlob(SSH_RSA, (positive_int(e, "RSA exponent"), positive_int(n, "RSA modulus")))

    zero, i = read_u32(inner, 0)
    if zero != 0:
        raise MalformedKeyData("unexpected DSA key data prefix")
    p, i = _read_bitcount_mpint(inner, i)
    g, i = _read_bitcount_mpint(inner, i)
    q, i = _read_bitcount_mpint(inner, i)
    y, i = _read_bitcount_mpint(inner, i)
    return PublicKeyBlob(
        SSH_DSS,
        tuple(positive_int(v, f"DSA {name}") for v, name in ((p, "p"), (q, "q"), (g, "g"), (y, "y"))),
    )


def parse(data: bytes) -> ParsedKey:
    headers, body = _split_headers(armored_lines(data, BEGIN, END))
    blob = b64decode_lines(body)

    magic, i = read_u32(blob, 0)
    if magic != MAGIC:
        raise MalformedKeyData(f"bad SSH.com magic 0x{magic:08x}")
    total, i = read_u32(blob, i)
    if total > len(blob):
        raise MalformedKeyData(f"declared length {total} exceeds {len(blob)} bytes")
    blob = blob[:total]

    type_name, i = read_text(blob, i)
    cipher, i = read_text(blob, i)
    keydata, i = read_string(blob, i)
    key_type = _key_type(type_name)
    encrypted = cipher != "none"

    # the key data is only readable in clear when no cipher is declared
    public = None if encrypted else _public_from_clear(key_type, keydata)
    return ParsedKey(
        format=KeyFormat.SSHCOM,
        key_type=key_type,
        encrypted=encrypted,
        public=public,
        comment=headers.get("comment") or None,
    )
