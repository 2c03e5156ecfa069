"""Key-value string stores used to persist series points."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import yaml

from station_charts.errors import StorageError

PathLike = Union[str, os.PathLike]


class KeyValueStore(Protocol):
    """Minimal interface for string stores keyed by ``<series>_<index>``."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Dictionary-backed store, mainly for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)


class YamlFileStore:
    """Store persisted as a flat YAML mapping, rewritten after every change."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except OSError as exc:
            raise StorageError(f"Failed to read store file {self.path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise StorageError(f"Invalid YAML in store file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Store file {self.path} must contain a mapping")
        return {str(k): str(v) for k, v in data.items()}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.path, "w", encoding="utf-8") as handle:
                yaml.safe_dump(self._data, handle, sort_keys=False, allow_unicode=True)
        except OSError as exc:
            raise StorageError(f"Failed to write store file {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    def keys(self):
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)
