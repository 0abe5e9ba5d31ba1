import base64
import binascii
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from .contracts import KeyDescriptor
from .errors import KeyIdentError
from .identifier import KeyIdentifier
from .logging_conf import setup_logging
from .path_utils import resolve_path
from .scan import scan_directory as _scan_directory
from .settings import Settings

settings = Settings.from_env()
identifier = KeyIdentifier(settings)

mcp = FastMCP(
    name="KeyIdent",
    instructions=(
        "Purpose: identify SSH private key files and return structured JSON metadata. "
        "No network access, no file writes, no decryption.\n\n"
        "Use me when: you need to know a key file's container format, algorithm, whether it is "
        "passphrase-protected, its size in bits, and its MD5/SHA256 fingerprints.\n"
        "Do NOT use me for: decrypting, converting or generating keys.\n\n"
        "How to call:\n"
        "- Local file → `identify_from_local_path(path=...)`.\n"
        "- Base64 file → `identify_from_b64_string(filename=..., content_b64=...)`.\n"
        "- Directory → `scan_directory(root=..., pattern=?)`.\n\n"
        "Inputs: OpenSSH (openssh-key-v1), legacy PEM (RSA/DSA/EC, unencrypted PKCS#8), "
        "PuTTY .ppk v2/v3, SSH.com/SECSH private keys.\n\n"
        "Outputs: `Format`, `Type`, `Encrypted`, and when recoverable without a passphrase "
        "`Bits`, `FingerprintMD5`, `FingerprintSHA256`. Absent values are null, never guessed.\n\n"
        "Safety: read-only and idempotent; raw key material is never returned."
    ),
)


def _describe(name_key: str, name_val: str, desc: KeyDescriptor) -> dict:
    return {name_key: name_val, **desc.as_dict()}


@mcp.tool(description="Health check, returns 'pong'.")
def ping() -> str:
    return "pong"


@mcp.tool(
    description=(
        "Identify a local private key file and return its format, type, encryption state, "
        "bit length and fingerprints. Read-only and idempotent."
    ),
    tags={"keyident", "ssh", "analysis", "filesystem"},
    annotations={
        "title": "Identify local key file",
        "readOnlyHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
def identify_from_local_path(
    path: Annotated[Path, Field(description="Local path to the key file.")],
) -> dict:
    p = resolve_path(str(path))
    try:
        return _describe("path", str(p), identifier.identify_file(p))
    except KeyIdentError as exc:
        raise ToolError(f"{exc.kind}: {exc}") from exc


@mcp.tool(
    description=(
        "Identify a private key provided as base64 of the raw file bytes. "
        "Use this when the client cannot expose a local path. Read-only and idempotent."
    ),
    tags={"keyident", "ssh", "analysis", "binary"},
    annotations={
        "title": "Identify base64 content",
        "readOnlyHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
def identify_from_b64_string(
    filename: Annotated[str, Field(description="Original filename, echoed back in the result.")],
    content_b64: Annotated[str, Field(description="RFC 4648 raw base64-encoded bytes of the file")],
) -> dict:
    try:
        data = base64.b64decode(content_b64, validate=True)
    except binascii.Error as exc:
        raise ToolError(f"content_b64 is not valid base64: {exc}") from exc
    try:
        return _describe("filename", filename, identifier.identify(data))
    except KeyIdentError as exc:
        raise ToolError(f"{exc.kind}: {exc}") from exc


@mcp.tool(
    description=(
        "Identify every file under a directory. Returns one entry per file with either the key "
        "description or the error kind, plus a failure count and a process-style exit code."
    ),
    tags={"keyident", "ssh", "analysis", "filesystem"},
    annotations={
        "title": "Scan directory",
        "readOnlyHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
def scan_directory(
    root: Annotated[Path, Field(description="Directory to walk recursively.")],
    pattern: Annotated[str, Field(description="Glob applied to file names, e.g. '*.ppk'.")] = "*",
) -> dict:
    try:
        report = _scan_directory(root, identifier, pattern)
    except NotADirectoryError as exc:
        raise ToolError(f"not a directory: {exc}") from exc
    return {**report.as_dict(), "exit_code": report.exit_code}


@mcp.tool(description="List the recognized key containers and what each exposes without a passphrase.")
def supported_formats() -> list[dict]:
    return [p.signature.as_dict() for p in identifier.parsers]


@mcp.prompt(
    name="audit_key_directory",
    description=(
        "Audit a directory of SSH keys by calling `scan_directory`, then report unencrypted "
        "keys, weak sizes and unreadable files."
    ),
    tags={"keyident", "prompt", "audit"},
)
def audit_key_directory(
    root: Annotated[str, Field(description="Directory holding the key files.")],
) -> str:
    return (
        "Task: Audit the SSH private keys stored under the given directory.\n\n"
        "1) Call the MCP tool `scan_directory` with the following JSON arguments:\n"
        "```json\n"
        f'{{"root": "{root}"}}\n'
        "```\n\n"
        "2) From the returned JSON, list: keys with Encrypted=false; RSA/DSA keys under 2048 bits; "
        "any DSA key; files reported with an error (give the error kind).\n\n"
        "OUTPUT EXACTLY TWO SECTIONS:\n"
        "A) Summary (2–4 bullet points)\n"
        "B) JSON on one line with keys: files, failures, unencrypted, weak\n"
        "If the tool call fails, output ERROR: <message> and stop. Do not invent results.\n"
    )


if __name__ == "__main__":
    setup_logging(settings)
    mcp.run()
