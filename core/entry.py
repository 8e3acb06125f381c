from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import DecodeWarning

logger = logging.getLogger(__name__)

TERMINATOR = "\0"
UNPARSABLE_TEXT = "Unable to parse project path."
NAME_COLUMN_WIDTH = 31


@dataclass(frozen=True)
class Entry:
    path: str
    key_suffix: Optional[str] = None
    terminated: bool = True

    @property
    def raw_text(self) -> str:
        return self.path + TERMINATOR if self.terminated else self.path

    @property
    def display_name(self) -> Optional[str]:
        return display_parts(self).name


@dataclass(frozen=True)
class DisplayRow:
    name: Optional[str]
    remainder: Optional[str]

    @property
    def parsable(self) -> bool:
        return self.name is not None

    @property
    def text(self) -> str:
        if not self.parsable:
            return UNPARSABLE_TEXT
        return f"{self.name:<{NAME_COLUMN_WIDTH}}{self.remainder}"


UNPARSABLE = DisplayRow(name=None, remainder=None)


def decode(raw: bytes, key_suffix: Optional[str] = None) -> Entry:
    """Decode one stored value into an Entry.

    The host writes UTF-8 text followed by a single NUL. Exactly one
    trailing NUL is stripped; a value without it is accepted and marked
    ``terminated=False``.
    """
    if not isinstance(raw, (bytes, bytearray)):
        raise DecodeWarning(f"Expected binary value, got {type(raw).__name__}")
    try:
        text = bytes(raw).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeWarning(f"Value is not valid UTF-8: {exc}") from exc

    terminated = text.endswith(TERMINATOR)
    path = text[:-1] if terminated else text
    if not path:
        raise DecodeWarning("Value holds an empty path")
    if not terminated:
        logger.debug("Value for %r has no trailing terminator", path)
    return Entry(path=path, key_suffix=key_suffix, terminated=terminated)


def encode(entry: Entry) -> bytes:
    return entry.raw_text.encode("utf-8")


def display_parts(entry: Entry) -> DisplayRow:
    # Name length is measured against the raw text, so a terminated value
    # yields the full final segment and an unterminated one loses a character.
    raw_text = entry.raw_text
    slash = raw_text.rfind("/")
    if slash <= 0:
        return UNPARSABLE
    length = len(raw_text) - slash - 2
    if length < 0:
        return UNPARSABLE
    name = raw_text[slash + 1 : slash + 1 + length]
    return DisplayRow(name=name, remainder=entry.path[:slash])
