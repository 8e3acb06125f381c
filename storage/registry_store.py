from __future__ import annotations

from typing import Any, List

from core.errors import KeyNotFound, NamespaceNotFound, StoreError

try:
    import winreg
except ImportError:  # not on Windows
    winreg = None


class RegistryStore:
    """Values under a key of HKEY_CURRENT_USER, written as REG_BINARY."""

    def open(self, location: str, writable: bool = False) -> Any:
        if winreg is None:
            raise StoreError("The Windows registry is not available on this platform")
        access = winreg.KEY_READ | (winreg.KEY_WRITE if writable else 0)
        try:
            return winreg.OpenKey(winreg.HKEY_CURRENT_USER, location, 0, access)
        except FileNotFoundError as exc:
            raise NamespaceNotFound(location) from exc
        except OSError as exc:
            raise StoreError(f"Cannot open HKCU\\{location}: {exc}") from exc

    def enumerate_keys(self, handle: Any) -> List[str]:
        try:
            count = winreg.QueryInfoKey(handle)[1]
            return [winreg.EnumValue(handle, index)[0] for index in range(count)]
        except OSError as exc:
            raise StoreError(f"Cannot enumerate values: {exc}") from exc

    def get_value(self, handle: Any, key: str) -> bytes:
        try:
            value, _kind = winreg.QueryValueEx(handle, key)
        except FileNotFoundError as exc:
            raise KeyNotFound(key) from exc
        except OSError as exc:
            raise StoreError(f"Cannot read {key}: {exc}") from exc
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    def set_value(self, handle: Any, key: str, data: bytes) -> None:
        try:
            winreg.SetValueEx(handle, key, 0, winreg.REG_BINARY, bytes(data))
        except OSError as exc:
            raise StoreError(f"Cannot write {key}: {exc}") from exc

    def delete_value(self, handle: Any, key: str) -> None:
        try:
            winreg.DeleteValue(handle, key)
        except FileNotFoundError as exc:
            raise KeyNotFound(key) from exc
        except OSError as exc:
            raise StoreError(f"Cannot delete {key}: {exc}") from exc

    def close(self, handle: Any) -> None:
        try:
            winreg.CloseKey(handle)
        except OSError as exc:
            raise StoreError(f"Cannot close registry key: {exc}") from exc
