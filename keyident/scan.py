"""Walk a directory tree and identify every key file in it."""
from __future__ import annotations

import logging
import os
from typing import Iterator, Optional

from .contracts import ErrorInfo, ScanEntry, ScanReport
from .errors import KeyIdentError
from .identifier import KeyIdentifier
from .path_utils import resolve_path

log = logging.getLogger(__name__)


def iter_files(root: str | os.PathLike[str], pattern: str = "*") -> Iterator[str]:
    base = resolve_path(root)
    for p in sorted(base.rglob(pattern)):
        if p.is_file():
            yield str(p)


def scan_directory(
    root: str | os.PathLike[str],
    identifier: Optional[KeyIdentifier] = None,
    pattern: str = "*",
) -> ScanReport:
    identifier = identifier or KeyIdentifier()
    base = resolve_path(root)
    if not base.is_dir():
        raise NotADirectoryError(str(base))

    entries = []
    for path in iter_files(base, pattern):
        try:
            entries.append(ScanEntry(path=path, key=identifier.identify_file(path)))
        except KeyIdentError as exc:
            log.info("%s: %s: %s", path, exc.kind, exc)
            entries.append(ScanEntry(path=path, error=ErrorInfo(kind=exc.kind, message=str(exc))))
    report = ScanReport(root=str(base), entries=entries)
    log.debug("scanned %d files under %s, %d failures", len(entries), base, report.failures)
    return report
