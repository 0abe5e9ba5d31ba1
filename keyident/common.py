import base64
import binascii
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .contracts import KeyFormat
from .errors import MalformedKeyData
from .wire import PublicKeyBlob


@dataclass(frozen=True)
class FormatSignature:
    format: KeyFormat
    markers: Tuple[bytes, ...]
    # public key readable without a passphrase, whatever the encryption state
    public_always_recoverable: bool
    # encryption state readable from clear-text headers, before any decoding
    encryption_flag_in_header: bool

    def matches(self, data: bytes) -> bool:
        return any(m in data for m in self.markers)

    def as_dict(self) -> dict:
        return {
            "format": self.format.value,
            "markers": [m.decode("ascii") for m in self.markers],
            "public_always_recoverable": self.public_always_recoverable,
            "encryption_flag_in_header": self.encryption_flag_in_header,
        }


@dataclass(frozen=True)
class ParsedKey:
    format: KeyFormat
    key_type: str
    encrypted: bool
    public: Optional[PublicKeyBlob] = None
    comment: Optional[str] = None


def armored_lines(data: bytes, begin: bytes, end: bytes) -> List[bytes]:
    """Stripped lines strictly between the ``begin`` and ``end`` armor lines."""
    s = data.find(begin)
    if s == -1:
        raise MalformedKeyData(f"missing {begin.decode('ascii')!r} line")
    e = data.find(end, s + len(begin))
    if e == -1:
        raise MalformedKeyData(f"missing {end.decode('ascii')!r} line")
    return [line.strip() for line in data[s + len(begin) : e].splitlines() if line.strip()]


def b64decode_lines(lines: List[bytes]) -> bytes:
    try:
        return base64.b64decode(b"".join(lines), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedKeyData(f"invalid base64 body: {exc}") from None
