from datetime import datetime, timedelta

import pytest

from station_charts.charting import ChartConfig, ChartEngine
from station_charts.io import MemoryStore
from station_charts.telemetry import Series

T0 = datetime(2024, 1, 1, 10, 0, 0)


def hours(n: float) -> datetime:
    return T0 + timedelta(hours=n)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def config() -> ChartConfig:
    return ChartConfig(width=100, height=100, x_max=24, y_distance=20)


@pytest.fixture
def series(store) -> Series:
    return Series("Temperature", store)


@pytest.fixture
def engine(series, config) -> ChartEngine:
    chart = ChartEngine(series, config)
    chart.show()
    return chart


@pytest.fixture
def three_point_engine(engine, series) -> ChartEngine:
    series.add_point(hours(0), 10)
    series.add_point(hours(1), 20)
    series.add_point(hours(2), 15)
    return engine
