"""Gemtext parser and body renderer.

The parser turns each line of a text/gemini body into one element from
pentode.models.elements. Elements are produced lazily while the body is still
arriving; a page cannot be rendered twice from the same stream.
"""

import codecs
import logging
from typing import Iterable, Iterator

from ..models.elements import GemtextElement, Heading, Link, PlainText
from ..models.status import BodyKind, body_kind, mime_params
from ..models.url import GEMINI_SCHEME, Url
from .errors import SaveError

logger = logging.getLogger(__name__)

ABSOLUTE_PREFIX = f"{GEMINI_SCHEME}://"


def resolve_link(target: str, base_url: Url) -> str:
    # Plain string join onto the page address, no path normalisation
    if target.startswith(ABSOLUTE_PREFIX):
        return target
    return str(base_url) + target


def charset(mimetype: str) -> str:
    name = mime_params(mimetype).get("charset", "utf-8")
    try:
        return codecs.lookup(name).name
    except LookupError:
        logger.warning("Unknown charset %r, decoding as utf-8", name)
        return "utf-8"


def parse_line(line: str, base_url: Url) -> GemtextElement:
    match = Link.RE.match(line)
    if match:
        target = resolve_link(match.group("url"), base_url)
        label = (match.group("label") or "").strip()
        return Link(target, label or target)

    match = Heading.RE.match(line)
    if match:
        return Heading(len(match.group(1)), line)

    return PlainText(line)


def parse_gemtext(lines: Iterable[str], base_url: Url) -> Iterator[GemtextElement]:
    """Lazily parse gemtext lines into elements, one element per line."""
    for line in lines:
        yield parse_line(line, base_url)


def render(body, mimetype: str, base_url: Url, sink) -> None:
    """
    Send a success body to the presentation sink.

    body is an open connection (anything with iter_lines() and read()).
    Gemtext is streamed element by element, other text is shown verbatim and
    anything else is saved to a file the user picks.
    """
    kind = body_kind(mimetype)
    encoding = charset(mimetype)
    logger.debug("Rendering %s as %s", base_url, kind.name)

    if kind is BodyKind.GEMTEXT:
        for element in parse_gemtext(body.iter_lines(encoding), base_url):
            sink.insert_element(element)
            sink.insert_raw_text("\n")
    elif kind is BodyKind.TEXT:
        sink.insert_raw_text("\n".join(body.iter_lines(encoding)))
    else:
        save_binary(body, base_url, sink)


def save_binary(body, base_url: Url, sink) -> str:
    data = body.read()
    path = sink.choose_save_destination(base_url.filename)
    if not path:
        raise SaveError(f"Download of {base_url} cancelled")
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise SaveError(f"Could not save {base_url} to {path}: {e}") from e
    logger.info("Saved %d bytes from %s to %s", len(data), base_url, path)
    sink.set_status_message(f"Saved to {path}")
    return path
