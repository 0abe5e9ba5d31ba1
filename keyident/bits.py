from typing import Dict

from .errors import MalformedKeyData, UnsupportedAlgorithm
from .keytypes import CURVES, SSH_DSS, SSH_ED25519, SSH_RSA
from .wire import PublicKeyBlob

FIXED_BITS: Dict[str, int] = {SSH_ED25519: 256}
FIXED_BITS.update({c.ssh_type: c.bits for c in CURVES})

# position of the size-defining integer in PublicKeyBlob.params
_SIZE_PARAM: Dict[str, int] = {
    SSH_RSA: 1,  # modulus n
    SSH_DSS: 0,  # prime p
}


def bit_length(blob: PublicKeyBlob) -> int:
    """Key size in bits.

    Fixed-size algorithms come from the table; RSA and DSA use the exact
    bit length of the modulus / prime, so a 1023-bit modulus stored in
    128 bytes reports 1023.
    """
    fixed = FIXED_BITS.get(blob.key_type)
    if fixed is not None:
        return fixed
    idx = _SIZE_PARAM.get(blob.key_type)
    if idx is None:
        raise UnsupportedAlgorithm(f"no bit length rule for {blob.key_type!r}")
    value = blob.params[idx]
    if not isinstance(value, int):
        raise TypeError(f"{blob.key_type} parameter {idx} must be an int")
    if value <= 0:
        raise MalformedKeyData(f"{blob.key_type} key size parameter is not positive")
    return value.bit_length()
