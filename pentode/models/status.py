# pentode/models/status.py
from enum import Enum


class StatusGroup(Enum):
    INPUT = 1
    SUCCESS = 2
    REDIRECT = 3
    TEMP_FAIL = 4
    PERM_FAIL = 5
    CLIENT_CERT = 6
    UNKNOWN = 0


class BodyKind(Enum):
    GEMTEXT = "text/gemini"
    TEXT = "text"
    BINARY = "binary"


def status_group(code: int) -> StatusGroup:
    """Map a status code onto its group by leading digit."""
    if not 10 <= code <= 69:
        return StatusGroup.UNKNOWN
    return StatusGroup(code // 10)


def media_type(mimetype: str) -> str:
    return mimetype.split(";", 1)[0].strip().lower()


def mime_params(mimetype: str) -> dict:
    params = {}
    for part in mimetype.split(";")[1:]:
        if "=" in part:
            key, value = part.split("=", 1)
            params[key.strip().lower()] = value.strip().strip('"')
    return params


def body_kind(mimetype: str) -> BodyKind:
    kind = media_type(mimetype)
    if kind == BodyKind.GEMTEXT.value:
        return BodyKind.GEMTEXT
    if kind.startswith("text/"):
        return BodyKind.TEXT
    return BodyKind.BINARY
