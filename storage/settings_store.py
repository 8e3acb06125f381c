from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from PySide6.QtCore import QByteArray, QSettings

from core.config import DEFAULT_VALUE_PREFIX
from core.errors import KeyNotFound, NamespaceNotFound, StoreError

INDEX_PATTERN = re.compile(r"^-?(\d+)(?=_|$)")


@dataclass
class SettingsHandle:
    settings: QSettings
    location: str
    writable: bool


def split_location(location: str) -> List[str]:
    return [part for part in re.split(r"[\\/]+", location) if part]


class SettingsFileStore:
    """INI file store backed by QSettings; the location maps to nested groups."""

    def __init__(self, path: Path, value_prefix: str = DEFAULT_VALUE_PREFIX) -> None:
        self.path = Path(path)
        self.value_prefix = value_prefix

    def open(self, location: str, writable: bool = False) -> SettingsHandle:
        if not self.path.exists():
            raise NamespaceNotFound(str(self.path))
        settings = QSettings(str(self.path), QSettings.Format.IniFormat)
        if settings.status() != QSettings.Status.NoError:
            raise StoreError(f"Cannot read {self.path}")
        for part in split_location(location):
            if part not in settings.childGroups():
                raise NamespaceNotFound(location)
            settings.beginGroup(part)
        if writable and not settings.isWritable():
            raise StoreError(f"{self.path} is not writable")
        return SettingsHandle(settings=settings, location=location, writable=writable)

    def enumerate_keys(self, handle: SettingsHandle) -> List[str]:
        # childKeys() is sorted as text; put prefixed keys back in index order
        # in the slots they occupy, leaving other keys where they are.
        keys = list(handle.settings.childKeys())
        slots = [pos for pos, key in enumerate(keys) if key.startswith(self.value_prefix)]
        ordered = sorted((keys[pos] for pos in slots), key=self._index_key)
        for pos, key in zip(slots, ordered):
            keys[pos] = key
        return keys

    def get_value(self, handle: SettingsHandle, key: str) -> bytes:
        if not handle.settings.contains(key):
            raise KeyNotFound(key)
        value = handle.settings.value(key)
        if isinstance(value, QByteArray):
            return bytes(value.data())
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str):
            return value.encode("utf-8")
        raise StoreError(f"Unsupported value type for {key}: {type(value).__name__}")

    def set_value(self, handle: SettingsHandle, key: str, data: bytes) -> None:
        self._require_writable(handle)
        handle.settings.setValue(key, QByteArray(bytes(data)))

    def delete_value(self, handle: SettingsHandle, key: str) -> None:
        self._require_writable(handle)
        if not handle.settings.contains(key):
            raise KeyNotFound(key)
        handle.settings.remove(key)

    def close(self, handle: SettingsHandle) -> None:
        if not handle.writable:
            return
        handle.settings.sync()
        if handle.settings.status() != QSettings.Status.NoError:
            raise StoreError(f"Failed to write {self.path}")

    def _index_key(self, key: str) -> Tuple[int, int]:
        match = INDEX_PATTERN.match(key[len(self.value_prefix):])
        if match is None:
            return (1, 0)
        return (0, int(match.group(1)))

    def _require_writable(self, handle: SettingsHandle) -> None:
        if not handle.writable:
            raise StoreError(f"Handle for {handle.location} is read-only")
