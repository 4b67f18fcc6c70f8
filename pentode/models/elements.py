"""
Elements of the text/gemini format.

The renderer never hands markup to the presentation layer: every line of a
page becomes one of the dataclasses below, and the presentation layer decides
how to draw it.
"""

import re
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Link:
    """
    Link line. `target` is always absolute by the time an element is built,
    `label` falls back to the target when the line carries no label.
    """

    target: str
    label: str
    RE = re.compile(r"=>\s*(?P<url>\S+)(\s+(?P<label>.+))?")


@dataclass(frozen=True)
class Heading:
    """
    Heading line. `text` is the raw line with its leading hashes kept.
    """

    level: int
    text: str
    RE = re.compile(r"(#{1,3})(?!#)")

    def __post_init__(self):
        if not 1 <= self.level <= 3:
            raise ValueError("heading level must be between 1 and 3")


@dataclass(frozen=True)
class PlainText:
    text: str


GemtextElement = Union[Link, Heading, PlainText]
