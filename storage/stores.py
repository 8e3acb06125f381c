from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set, Tuple

from core.errors import KeyNotFound, NamespaceNotFound, StoreError


class StoreAdapter(Protocol):
    """Flat key/value namespace holding the host's recent entries."""

    def open(self, location: str, writable: bool = False) -> Any:
        ...

    def enumerate_keys(self, handle: Any) -> Sequence[str]:
        ...

    def get_value(self, handle: Any, key: str) -> bytes:
        ...

    def set_value(self, handle: Any, key: str, data: bytes) -> None:
        ...

    def delete_value(self, handle: Any, key: str) -> None:
        ...

    def close(self, handle: Any) -> None:
        ...


@dataclass
class MemoryHandle:
    location: str
    writable: bool
    closed: bool = False


@dataclass
class MemoryStore:
    """In-process store. Keeps insertion order and records every call."""

    namespaces: Dict[str, Dict[str, bytes]] = field(default_factory=dict)
    read_only: bool = False
    fail_on: Set[str] = field(default_factory=set)
    calls: List[Tuple[str, Optional[str]]] = field(default_factory=list)
    open_handles: int = 0

    def open(self, location: str, writable: bool = False) -> MemoryHandle:
        self._record("open", location)
        if location not in self.namespaces:
            raise NamespaceNotFound(location)
        if writable and self.read_only:
            raise StoreError(f"Access denied: {location}")
        self.open_handles += 1
        return MemoryHandle(location=location, writable=writable)

    def enumerate_keys(self, handle: MemoryHandle) -> List[str]:
        self._record("enumerate_keys", None)
        return list(self._values(handle))

    def get_value(self, handle: MemoryHandle, key: str) -> bytes:
        self._record("get_value", key)
        values = self._values(handle)
        if key not in values:
            raise KeyNotFound(key)
        return values[key]

    def set_value(self, handle: MemoryHandle, key: str, data: bytes) -> None:
        self._record("set_value", key)
        self._require_writable(handle)
        self._values(handle)[key] = bytes(data)

    def delete_value(self, handle: MemoryHandle, key: str) -> None:
        self._record("delete_value", key)
        self._require_writable(handle)
        values = self._values(handle)
        if key not in values:
            raise KeyNotFound(key)
        del values[key]

    def close(self, handle: MemoryHandle) -> None:
        self._record("close", None)
        if not handle.closed:
            handle.closed = True
            self.open_handles -= 1

    def mutations(self) -> List[Tuple[str, Optional[str]]]:
        return [call for call in self.calls if call[0] in ("set_value", "delete_value")]

    def _values(self, handle: MemoryHandle) -> Dict[str, bytes]:
        if handle.closed:
            raise StoreError("Handle already closed")
        return self.namespaces[handle.location]

    def _require_writable(self, handle: MemoryHandle) -> None:
        if not handle.writable:
            raise StoreError(f"Handle for {handle.location} is read-only")

    def _record(self, op: str, key: Optional[str]) -> None:
        self.calls.append((op, key))
        if op in self.fail_on:
            raise StoreError(f"Injected failure in {op}")
