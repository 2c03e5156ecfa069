import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from station_charts.errors import ConfigurationError

PROJECT_MARKERS: Iterable[str] = (".git", "pyproject.toml", "config")
DEFAULT_SETTINGS_PATH = Path("config/settings.yml")
DEFAULT_STORAGE_PATH = Path("data/points.yml")
DEFAULT_SERIES = ("Temperature", "Humidity", "Voltage")

PathLike = Union[str, os.PathLike]


def find_project_root(markers: Iterable[str] = PROJECT_MARKERS) -> Path:
    """Attempt to locate the repository root by walking up until a marker file/dir appears."""
    start = Path(__file__).resolve().parent
    for candidate in [start] + list(start.parents):
        for marker in markers:
            if (candidate / marker).exists():
                return candidate
    return start


def _resolve(path: PathLike, project_root: Path) -> Path:
    target = Path(path)
    if not target.is_absolute():
        target = project_root / target
    return target


def _load_yaml(target: Path) -> Dict[str, Any]:
    if not target.exists():
        raise FileNotFoundError(f"settings file not found: {target}")
    with open(target, "r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in settings file {target}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {target} must contain a mapping")
    return data


def load_settings(path: Optional[PathLike] = None) -> Dict[str, Any]:
    """Load the YAML settings file, defaulting to ``config/settings.yml`` under the project root."""
    project_root = find_project_root()
    target = _resolve(path or DEFAULT_SETTINGS_PATH, project_root)
    return _load_yaml(target)


def series_names_from_settings(settings: Dict[str, Any]) -> List[str]:
    names = settings.get("series", list(DEFAULT_SERIES))
    if not isinstance(names, list) or not names:
        raise ConfigurationError("'series' must be a non-empty list of names")
    cleaned = [str(name) for name in names]
    ids = [name.replace(" ", "") for name in cleaned]
    if len(set(ids)) != len(ids):
        raise ConfigurationError(f"Series names collide once spaces are removed: {cleaned}")
    return cleaned


def storage_path_from_settings(settings: Dict[str, Any]) -> Path:
    storage = settings.get("storage", {}) or {}
    return _resolve(storage.get("path", DEFAULT_STORAGE_PATH), find_project_root())
