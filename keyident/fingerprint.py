import base64
import hashlib
from typing import Tuple

from .wire import PublicKeyBlob


def fp_md5(blob: bytes) -> str:
    return ":".join(f"{b:02x}" for b in hashlib.md5(blob).digest())


def fp_sha256(blob: bytes) -> str:
    return "SHA256:" + base64.b64encode(hashlib.sha256(blob).digest()).decode(
        "ascii"
    ).rstrip("=")


def fingerprints(pub: PublicKeyBlob) -> Tuple[str, str]:
    """(MD5, SHA256) fingerprints as printed by ``ssh-keygen -l``, MD5 without its prefix."""
    wire = pub.to_wire()
    return fp_md5(wire), fp_sha256(wire)
