"""Wiring of series, charts and view controllers for one weather station."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from station_charts.charting.engine import ChartEngine
from station_charts.charting.model import ChartConfig
from station_charts.charting.viewer import ViewController
from station_charts.charting.views import ViewWindow
from station_charts.errors import ConfigurationError, DataCorruptionError
from station_charts.ingest.serial_source import parse_reading_line
from station_charts.io.settings import series_names_from_settings, storage_path_from_settings
from station_charts.io.storage import KeyValueStore, MemoryStore, YamlFileStore
from station_charts.telemetry.logger import CsvReadingLogger
from station_charts.telemetry.series import Series

logger = logging.getLogger(__name__)


def chart_config_from_settings(settings: Dict[str, Any]) -> ChartConfig:
    """Build the chart configuration from the ``chart`` section of the settings."""
    section = settings.get("chart")
    if not isinstance(section, dict):
        raise ConfigurationError("Settings are missing a 'chart' mapping")
    return ChartConfig.from_mapping(section)


@dataclass(slots=True)
class StationChart:
    """One metric: its series, the chart drawing it and its view controller."""

    series: Series
    engine: ChartEngine
    viewer: ViewController


class StationHub:
    """Owns every series of the station and routes readings to them."""

    def __init__(
        self,
        series_names: Iterable[str],
        chart_config: ChartConfig,
        store: Optional[KeyValueStore] = None,
        reading_logger: Optional[CsvReadingLogger] = None,
    ) -> None:
        self.store = store if store is not None else MemoryStore()
        self.reading_logger = reading_logger
        self._charts: Dict[str, StationChart] = {}
        for name in series_names:
            series = Series(name, self.store)
            if series.id in self._charts:
                raise ConfigurationError(f"Duplicate series id '{series.id}'")
            engine = ChartEngine(series, chart_config)
            self._charts[series.id] = StationChart(series, engine, ViewController(engine))
        if not self._charts:
            raise ConfigurationError("A station needs at least one series")

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], store: Optional[KeyValueStore] = None) -> "StationHub":
        if store is None:
            store = YamlFileStore(storage_path_from_settings(settings))
        reading_logger = None
        log_section = settings.get("logging", {}) or {}
        names = series_names_from_settings(settings)
        if log_section.get("reading_log"):
            columns = [name.replace(" ", "") for name in names]
            reading_logger = CsvReadingLogger(Path(log_section["reading_log"]), columns)
        return cls(names, chart_config_from_settings(settings), store, reading_logger)

    # ------------------------------------------------------------------
    def __contains__(self, name: str) -> bool:
        return self._key(name) in self._charts

    def __iter__(self):
        return iter(self._charts.values())

    def __len__(self) -> int:
        return len(self._charts)

    @staticmethod
    def _key(name: str) -> str:
        return name.replace(" ", "")

    def chart(self, name: str) -> StationChart:
        try:
            return self._charts[self._key(name)]
        except KeyError:
            raise KeyError(f"Unknown series '{name}'") from None

    def series(self, name: str) -> Series:
        return self.chart(name).series

    def engine(self, name: str) -> ChartEngine:
        return self.chart(name).engine

    @property
    def names(self) -> List[str]:
        return [chart.series.name for chart in self._charts.values()]

    # ------------------------------------------------------------------
    def start(self) -> Dict[str, Optional[DataCorruptionError]]:
        """Show every chart and load the stored points into it."""
        for chart in self._charts.values():
            chart.engine.show()
        return self.recover_all()

    def recover_all(self) -> Dict[str, Optional[DataCorruptionError]]:
        """Recover each series; corruption in one does not stop the others."""
        errors: Dict[str, Optional[DataCorruptionError]] = {}
        for key, chart in self._charts.items():
            try:
                chart.series.recover_data()
                errors[key] = None
            except DataCorruptionError as exc:
                logger.warning("Series %s: recovery stopped after %d point(s)", key, len(chart.series))
                errors[key] = exc
        return errors

    def stop(self) -> None:
        for chart in self._charts.values():
            chart.engine.close()
        if self.reading_logger is not None:
            self.reading_logger.close()

    # ------------------------------------------------------------------
    def ingest(self, values: Mapping[str, float], timestamp: Optional[datetime] = None) -> datetime:
        """Add one reading (``{series name: value}``) stamped with ``timestamp`` or now."""
        timestamp = timestamp or datetime.now()
        unknown = [name for name in values if self._key(name) not in self._charts]
        if unknown:
            raise KeyError(f"Reading contains unknown series: {unknown}")
        for name, value in values.items():
            self.series(name).add_point(timestamp, value)
        if self.reading_logger is not None:
            self.reading_logger.log(timestamp, {self._key(name): value for name, value in values.items()})
        return timestamp

    def ingest_line(self, line: str, timestamp: Optional[datetime] = None) -> Optional[datetime]:
        """Parse and ingest a serial reading line. Malformed lines are logged and skipped."""
        try:
            values = parse_reading_line(line, self.names)
        except ValueError as exc:
            logger.warning("Skipping reading: %s", exc)
            return None
        return self.ingest(values, timestamp)

    def set_view(self, window: Union[ViewWindow, str]) -> Dict[str, bool]:
        """Apply a view window to every chart and report which accepted it."""
        window = ViewWindow.parse(window)
        return {key: chart.viewer.set_view(window) for key, chart in self._charts.items()}
