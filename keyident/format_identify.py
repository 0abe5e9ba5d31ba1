from typing import Callable, NamedTuple, Sequence

from .common import FormatSignature, ParsedKey
from .errors import UnrecognizedFormat


class FormatParser(NamedTuple):
    signature: FormatSignature
    parse: Callable[[bytes], ParsedKey]


def detect(data: bytes, parsers: Sequence[FormatParser]) -> FormatParser:
    """First parser whose header markers occur in ``data``, in list order."""
    for parser in parsers:
        if parser.signature.matches(data):
            return parser
    raise UnrecognizedFormat("no known private key header found")
