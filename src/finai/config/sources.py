"""Injected read/write sources for connection configuration.

The resolver never touches ``os.environ`` or browser storage directly; it is
handed one of these instead.
"""

from typing import Any, Mapping, Optional, Protocol


class ConfigSource(Protocol):
    def get(self, key: str) -> Optional[str]: ...


class KeyValueStore(ConfigSource, Protocol):
    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MappingSource:
    """Read-only view over a name/value mapping such as ``os.environ``."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = values

    def get(self, key: str) -> Optional[str]:
        value = self._values.get(key)
        if value is None:
            return None
        return str(value)


class ClientStorageSource:
    """Adapter over flet's ``page.client_storage`` (browser local storage in web mode)."""

    def __init__(self, client_storage: Any) -> None:
        self._storage = client_storage

    def get(self, key: str) -> Optional[str]:
        value = self._storage.get(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._storage.set(key, value)

    def remove(self, key: str) -> None:
        if self._storage.contains_key(key):
            self._storage.remove(key)
