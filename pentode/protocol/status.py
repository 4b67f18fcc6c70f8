# pentode/protocol/status.py
from typing import Tuple

from .errors import MalformedHeaderError


def parse_status(line: str) -> Tuple[int, str]:
    """
    Split a status line into its numeric code and meta string.

    Meta is everything after the first whitespace run and is returned
    verbatim; its meaning depends on the code.
    """
    fields = line.rstrip("\r\n").split(None, 1)
    if len(fields) < 2:
        raise MalformedHeaderError(f"Status line needs a code and meta: {line!r}")
    code, meta = fields
    try:
        return int(code), meta
    except ValueError as e:
        raise MalformedHeaderError(f"Status code is not a number: {code!r}") from e
