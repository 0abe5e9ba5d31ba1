import os
import pathlib
import re
from urllib.parse import unquote, urlparse


def _norm(p: pathlib.Path) -> pathlib.Path:
    return p.expanduser().resolve(strict=False)


def parse_file_uri(uri_or_path: str) -> pathlib.Path:
    if uri_or_path.startswith("file://"):
        path = urlparse(uri_or_path).path or ""
        if os.name == "nt":
            m = re.match(r"^/([A-Za-z]:/.*)$", path)
            if m:
                path = m.group(1)
        return pathlib.Path(unquote(path))
    return pathlib.Path(uri_or_path)


def resolve_path(path_like: str | os.PathLike[str]) -> pathlib.Path:
    return _norm(parse_file_uri(os.fspath(path_like)))
