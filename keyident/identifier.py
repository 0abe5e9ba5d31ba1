# keyident/identifier.py
from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence

from .bits import bit_length
from .contracts import KeyDescriptor
from .errors import InputTooLarge, KeyIdentError, KeyReadError, MalformedKeyData
from .fingerprint import fingerprints
from .format_identify import FormatParser, detect
from .formats import openssh as fmt_openssh
from .formats import pem as fmt_pem
from .formats import putty as fmt_putty
from .formats import sshcom as fmt_sshcom
from .path_utils import resolve_path
from .settings import Settings

log = logging.getLogger(__name__)


def default_parsers() -> List[FormatParser]:
    # order matters: detection stops at the first matching header
    return [
        FormatParser(fmt_openssh.SIGNATURE, fmt_openssh.parse),
        FormatParser(fmt_pem.SIGNATURE, fmt_pem.parse),
        FormatParser(fmt_putty.SIGNATURE, fmt_putty.parse),
        FormatParser(fmt_sshcom.SIGNATURE, fmt_sshcom.parse),
    ]


class KeyIdentifier:
    """Identify private key files: format, algorithm, encryption, size, fingerprints.

    Instances only hold configuration and can be shared between threads.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        max_input_size: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        parsers: Optional[Sequence[FormatParser]] = None,
    ) -> None:
        settings = settings or Settings()
        if max_input_size is None:
            max_input_size = settings.MAX_INPUT_SIZE
        if max_input_size <= 0:
            raise ValueError(f"max_input_size must be positive, got {max_input_size}")
        self._max_input_size = max_input_size
        self._log = logger or log
        self._parsers = tuple(parsers if parsers is not None else default_parsers())

    @property
    def max_input_size(self) -> int:
        return self._max_input_size

    @property
    def parsers(self) -> Sequence[FormatParser]:
        return self._parsers

    def identify(self, data: bytes) -> KeyDescriptor:
        if len(data) > self._max_input_size:
            raise InputTooLarge(f"input is {len(data)} bytes, limit is {self._max_input_size}")
        try:
            parser = detect(data, self._parsers)
            fmt = parser.signature.format.value
            self._log.debug("detected %s key container", fmt)
            parsed = parser.parse(data)
            if parsed.public is None and parser.signature.public_always_recoverable:
                raise MalformedKeyData(f"{fmt} key without a public key")
            bits = md5 = sha256 = None
            if parsed.public is not None:
                bits = bit_length(parsed.public)
                md5, sha256 = fingerprints(parsed.public)
        except KeyIdentError as exc:
            self._log.debug("identification failed: %s: %s", exc.kind, exc)
            raise

        desc = KeyDescriptor(
            format=parsed.format,
            type=parsed.key_type,
            encrypted=parsed.encrypted,
            bits=bits,
            fingerprint_md5=md5,
            fingerprint_sha256=sha256,
            comment=parsed.comment,
        )
        self._log.debug(
            "identified %s %s encrypted=%s bits=%s", desc.format.value, desc.type, desc.encrypted, desc.bits
        )
        return desc

    def identify_file(self, path: str | os.PathLike[str]) -> KeyDescriptor:
        p = resolve_path(path)
        try:
            size = p.stat().st_size
            if size > self._max_input_size:
                raise InputTooLarge(f"{p} is {size} bytes, limit is {self._max_input_size}")
            data = p.read_bytes()
        except OSError as exc:
            raise KeyReadError(f"cannot read {p}: {exc.strerror or exc}") from exc
        return self.identify(data)


def identify(
    data: bytes,
    *,
    max_input_size: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> KeyDescriptor:
    return KeyIdentifier(max_input_size=max_input_size, logger=logger).identify(data)
