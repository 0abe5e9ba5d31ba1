# keyident/contracts.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .keytypes import type_family


class KeyFormat(str, Enum):
    LEGACY_PEM = "legacy-pem"
    OPENSSH_NEW = "openssh-new"
    PUTTY = "putty"
    SSHCOM = "sshcom"
    UNKNOWN = "unknown"


class KeyDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format: KeyFormat = Field(..., alias="Format", examples=["openssh-new"])
    type: str = Field(..., alias="Type", examples=["ssh-ed25519", "ecdsa-sha2-nistp256"])
    encrypted: bool = Field(..., alias="Encrypted")
    bits: Optional[int] = Field(None, alias="Bits")
    fingerprint_md5: Optional[str] = Field(None, alias="FingerprintMD5")
    fingerprint_sha256: Optional[str] = Field(None, alias="FingerprintSHA256")
    comment: Optional[str] = Field(None, alias="Comment")

    @property
    def family(self) -> str:
        return type_family(self.type)

    def as_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ErrorInfo(BaseModel):
    kind: str = Field(..., examples=["MalformedKeyData"])
    message: str


class ScanEntry(BaseModel):
    path: str
    key: Optional[KeyDescriptor] = None
    error: Optional[ErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanReport(BaseModel):
    root: str
    entries: List[ScanEntry] = []

    @property
    def failures(self) -> int:
        return sum(1 for e in self.entries if not e.ok)

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0

    def as_dict(self) -> dict:
        return {
            "root": self.root,
            "files": len(self.entries),
            "failures": self.failures,
            "entries": [
                {
                    "path": e.path,
                    "key": e.key.as_dict() if e.key else None,
                    "error": e.error.model_dump() if e.error else None,
                }
                for e in self.entries
            ],
        }
