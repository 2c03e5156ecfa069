"""I/O utilities (settings, point storage)."""

from .settings import (
    DEFAULT_SETTINGS_PATH,
    DEFAULT_STORAGE_PATH,
    find_project_root,
    load_settings,
    series_names_from_settings,
    storage_path_from_settings,
)
from .storage import KeyValueStore, MemoryStore, YamlFileStore

__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "DEFAULT_STORAGE_PATH",
    "KeyValueStore",
    "MemoryStore",
    "YamlFileStore",
    "find_project_root",
    "load_settings",
    "series_names_from_settings",
    "storage_path_from_settings",
]
