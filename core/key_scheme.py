from __future__ import annotations

from typing import Iterable, Optional, Protocol

from .entry import Entry


class KeyScheme(Protocol):
    name: str

    def suffix_for(self, key_name: str) -> Optional[str]:
        ...

    def compute_key(self, entry: Entry, position: int) -> str:
        ...


class HashSuffixedScheme:
    """Keys look like ``<prefix>-0_h3231718299``; the hash part is kept verbatim."""

    name = "hash"

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def suffix_for(self, key_name: str) -> Optional[str]:
        remainder = key_name[len(self.prefix):]
        dash = remainder.rfind("-")
        if dash < 0:
            return remainder
        return remainder[dash:]

    def compute_key(self, entry: Entry, position: int) -> str:
        return self.prefix + (entry.key_suffix or "")


class IndexSuffixedScheme:
    """Keys look like ``<prefix>0``, ``<prefix>1``... in list order."""

    name = "index"

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def suffix_for(self, key_name: str) -> Optional[str]:
        return None

    def compute_key(self, entry: Entry, position: int) -> str:
        return f"{self.prefix}{position}"


def _is_index(text: str) -> bool:
    return bool(text) and all("0" <= ch <= "9" for ch in text)


def detect_scheme(key_names: Iterable[str], prefix: str) -> KeyScheme:
    remainders = [name[len(prefix):] for name in key_names if name.startswith(prefix)]
    if remainders and all(_is_index(item) for item in remainders):
        return IndexSuffixedScheme(prefix)
    return HashSuffixedScheme(prefix)
