import pytest

from station_charts.charting import ChartConfig, ChartEngine, ViewController, ViewWindow, window_spec
from station_charts.charting.views import UNBOUNDED, window_hours, window_ledger_lines, window_unit
from station_charts.telemetry import Series
from station_charts.units import XUnit

from conftest import hours


def _hourly_engine(span_hours: int) -> ChartEngine:
    series = Series("Temperature")
    engine = ChartEngine(series, ChartConfig(width=200, height=100, x_max=24, x_ledger_lines=4, unit=XUnit.HOURS))
    engine.show()
    series.add_points((hours(h), 20 + (h % 5)) for h in range(span_hours + 1))
    return engine


def test_window_table():
    assert window_hours(ViewWindow.LAST_24_HOURS) == 24
    assert window_hours(ViewWindow.LAST_7_DAYS) == 168
    assert window_hours(ViewWindow.LAST_28_DAYS) == 672
    assert window_hours(ViewWindow.LAST_3_MONTHS) == 2016
    assert window_hours(ViewWindow.LAST_6_MONTHS) == 4032
    assert [window_ledger_lines(w) for w in list(ViewWindow)[:5]] == [5, 6, 3, 2, 5]
    assert window_unit("last_7_days") is XUnit.DAYS
    assert window_unit("LAST_3_MONTHS") is XUnit.MONTHS
    assert window_spec(ViewWindow.DEFAULT).hours == UNBOUNDED
    assert window_spec(ViewWindow.DEFAULT).bounded is False


def test_unknown_window_name():
    with pytest.raises(ValueError):
        ViewWindow.parse("last_year")


def test_window_beyond_history_is_rejected():
    engine = _hourly_engine(72)
    viewer = ViewController(engine)
    before = engine.frame()

    assert viewer.set_view(ViewWindow.LAST_7_DAYS) is False
    assert engine.x_max == 24
    assert engine.x_ledger_lines == 4
    assert engine.frame() == before
    assert viewer.current is None


def test_window_within_history_reconfigures():
    engine = _hourly_engine(72)
    viewer = ViewController(engine)

    assert viewer.set_view("last_24_hours") is True
    assert engine.x_max == 24
    assert engine.x_ledger_lines == 5
    assert engine.unit is XUnit.HOURS
    assert len(engine.frame().markers) == 73
    assert viewer.current is ViewWindow.LAST_24_HOURS


def test_default_window_restores_original_settings():
    engine = _hourly_engine(200)
    viewer = ViewController(engine)
    assert viewer.set_view(ViewWindow.LAST_7_DAYS) is True
    assert (engine.x_max, engine.x_ledger_lines, engine.unit) == (168, 6, XUnit.DAYS)

    assert viewer.reset() is True
    assert (engine.x_max, engine.x_ledger_lines, engine.unit) == (24, 4, XUnit.HOURS)
    assert viewer.current is ViewWindow.DEFAULT


def test_feasibility_boundary():
    viewer = ViewController(_hourly_engine(24))
    assert viewer.is_feasible(ViewWindow.LAST_24_HOURS) is True
    assert viewer.is_feasible(ViewWindow.LAST_7_DAYS) is False
    assert viewer.is_feasible(ViewWindow.DEFAULT) is True


def test_empty_series_only_accepts_default():
    engine = ChartEngine(Series("Humidity"), ChartConfig(width=100, height=100, x_max=24))
    viewer = ViewController(engine)
    assert viewer.set_view(ViewWindow.LAST_24_HOURS) is False
    assert viewer.set_view(ViewWindow.DEFAULT) is True
