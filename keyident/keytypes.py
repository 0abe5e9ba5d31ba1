"""Canonical SSH algorithm names.

Every spelling a container may use for an algorithm goes through this table,
so the mapping can change without touching the format parsers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type

from cryptography.hazmat.primitives.asymmetric import ec

from .errors import UnsupportedAlgorithm

SSH_RSA = "ssh-rsa"
SSH_DSS = "ssh-dss"
SSH_ED25519 = "ssh-ed25519"
ECDSA = "ecdsa"
ECDSA_PREFIX = "ecdsa-sha2-"


@dataclass(frozen=True)
class Curve:
    name: str
    oid: str
    bits: int
    ec_curve: Type[ec.EllipticCurve]
    # field prime, used to recognize curves spelled out as explicit parameters
    prime: int

    @property
    def ssh_type(self) -> str:
        return ECDSA_PREFIX + self.name


CURVES: Tuple[Curve, ...] = (
    Curve("nistp256", "1.2.840.10045.3.1.7", 256, ec.SECP256R1, 2**256 - 2**224 + 2**192 + 2**96 - 1),
    Curve("nistp384", "1.3.132.0.34", 384, ec.SECP384R1, 2**384 - 2**128 - 2**96 + 2**32 - 1),
    Curve("nistp521", "1.3.132.0.35", 521, ec.SECP521R1, 2**521 - 1),
)

_CURVE_BY_NAME: Dict[str, Curve] = {c.name: c for c in CURVES}
_CURVE_BY_OID: Dict[str, Curve] = {c.oid: c for c in CURVES}

# short names and label spellings -> canonical identifier
_ALIASES: Dict[str, str] = {
    "rsa": SSH_RSA,
    SSH_RSA: SSH_RSA,
    "dsa": SSH_DSS,
    "dss": SSH_DSS,
    SSH_DSS: SSH_DSS,
    "ed25519": SSH_ED25519,
    SSH_ED25519: SSH_ED25519,
    "ec": ECDSA,
    "ecdsa": ECDSA,
}
_ALIASES.update({c.ssh_type: c.ssh_type for c in CURVES})


def normalize_type(name: str) -> str:
    canonical = _ALIASES.get(name.strip().lower())
    if canonical is None:
        raise UnsupportedAlgorithm(f"unsupported key algorithm: {name!r}")
    return canonical


def type_family(key_type: str) -> str:
    """`ecdsa-sha2-nistp384` -> `ecdsa`; other types are their own family."""
    if key_type.startswith(ECDSA_PREFIX) or key_type == ECDSA:
        return ECDSA
    return key_type


def curve_by_name(name: str) -> Curve:
    try:
        return _CURVE_BY_NAME[name]
    except KeyError:
        raise UnsupportedAlgorithm(f"unsupported ECDSA curve: {name!r}") from None


def curve_by_oid(oid: str) -> Curve:
    try:
        return _CURVE_BY_OID[oid]
    except KeyError:
        raise UnsupportedAlgorithm(f"unsupported elliptic curve OID: {oid}") from None


def curve_for_type(key_type: str) -> Optional[Curve]:
    if not key_type.startswith(ECDSA_PREFIX):
        return None
    return curve_by_name(key_type[len(ECDSA_PREFIX):])
