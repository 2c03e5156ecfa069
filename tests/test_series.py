from datetime import datetime

import pytest

from station_charts.errors import DataCorruptionError
from station_charts.io import MemoryStore
from station_charts.telemetry import Point, Series
from station_charts.units import InstantX, NumericX

from conftest import hours


class RecordingObserver:
    def __init__(self):
        self.calls = []

    def on_point_added(self, changed):
        self.calls.append(("point", changed))

    def on_points_added(self, amount):
        self.calls.append(("points", amount))


def test_id_strips_spaces_and_keys_are_indexed():
    series = Series("Wind Speed")
    assert series.id == "WindSpeed"
    assert series.name == "Wind Speed"
    assert series.storage_key(3) == "WindSpeed_3"


def test_extrema_follow_every_point():
    series = Series("Temperature")
    values = [12.0, 9.5, 14.0, 11.0, 14.0, -2.0]
    for i, value in enumerate(values):
        series.add_point(i, value)
        seen = values[: i + 1]
        assert series.y_min == min(seen)
        assert series.y_max == max(seen)


def test_add_point_reports_extrema_change():
    series = Series("Temperature")
    assert series.add_point(0, 10) is True
    assert series.add_point(1, 20) is True
    assert series.add_point(2, 15) is False
    assert series.add_point(3, 20) is False


def test_observer_notifications():
    series = Series("Temperature")
    observer = RecordingObserver()
    series.subscribe(observer)
    series.add_point(0, 1)
    series.add_point(1, 1, notify=False)
    series.add_points([(2, 5), Point(NumericX(3), 0)])
    assert observer.calls == [("point", True), ("points", 2)]


def test_second_observer_is_rejected():
    series = Series("Temperature")
    series.subscribe(RecordingObserver())
    with pytest.raises(RuntimeError):
        series.subscribe(RecordingObserver())


def test_add_points_empty_is_noop(store):
    series = Series("Temperature", store)
    observer = RecordingObserver()
    series.subscribe(observer)
    series.add_points([])
    assert len(series) == 0
    assert observer.calls == []
    assert len(store) == 0


def test_mixing_x_types_is_rejected():
    series = Series("Temperature")
    series.add_point(hours(0), 1)
    with pytest.raises(TypeError):
        series.add_point(1.0, 2)


def test_failed_batch_rolls_back():
    series = Series("Temperature")
    series.add_point(hours(0), 5)
    with pytest.raises(TypeError):
        series.add_points([(hours(1), 50), (3.0, -50)])
    assert len(series) == 1
    assert (series.y_min, series.y_max) == (5, 5)


def test_failed_batch_leaves_store_untouched(store):
    series = Series("Temperature", store)
    with pytest.raises(TypeError):
        series.add_points([(1.0, 1.0), (2.0, 2.0), ("bad", 3.0)])
    assert len(store) == 0

    series.add_point(5.0, 5.0)
    assert store.keys() == ["Temperature_0"]

    restored = Series("Temperature", store)
    restored.recover_data()
    assert [(p.x, p.y) for p in restored] == [(NumericX(5.0), 5.0)]


def test_batch_is_stored_after_it_is_accepted(store):
    series = Series("Temperature", store)
    series.add_point(0.0, 1.0)
    series.add_points([(1.0, 2.0), (2.0, 3.0)])
    assert store.keys() == ["Temperature_0", "Temperature_1", "Temperature_2"]
    assert store.get("Temperature_2") == "2.0;3.0"


def test_points_persist_and_recover(store):
    original = Series("Temperature", store)
    original.add_point(hours(0), 10)
    original.add_point(hours(1), 20.5)
    assert store.get("Temperature_0") == "2024-01-01T10:00:00;10.0"

    restored = Series("Temperature", store)
    assert restored.recover_data() == 2
    assert restored.points == original.points
    assert (restored.y_min, restored.y_max) == (10.0, 20.5)
    # recovery does not write anything back
    assert sorted(store.keys()) == ["Temperature_0", "Temperature_1"]


def test_numeric_points_recover():
    store = MemoryStore()
    original = Series("Voltage", store)
    for i, value in enumerate([3.3, 3.1, 3.25]):
        original.add_point(i * 0.5, value)
    restored = Series("Voltage", store)
    restored.recover_data()
    assert [p.x for p in restored] == [NumericX(0.0), NumericX(0.5), NumericX(1.0)]
    assert [p.y for p in restored] == [3.3, 3.1, 3.25]


def test_recovery_stops_at_gap():
    store = MemoryStore({"Humidity_0": "1;40", "Humidity_1": "2;41", "Humidity_3": "4;43"})
    series = Series("Humidity", store)
    assert series.recover_data() == 2


def test_recovery_keeps_prefix_before_corrupt_entry():
    store = MemoryStore({"Humidity_0": "1;40", "Humidity_1": "oops", "Humidity_2": "3;42"})
    series = Series("Humidity", store)
    with pytest.raises(DataCorruptionError) as excinfo:
        series.recover_data()
    assert excinfo.value.key == "Humidity_1"
    assert [p.y for p in series] == [40.0]
    assert series.is_recovering is False


def test_recovery_stops_at_mixed_x_types():
    store = MemoryStore(
        {"Temperature_0": "1.0;40", "Temperature_1": "2.0;41", "Temperature_2": "2024-01-01T10:00:00;42"}
    )
    series = Series("Temperature", store)
    with pytest.raises(DataCorruptionError) as excinfo:
        series.recover_data()
    assert excinfo.value.key == "Temperature_2"
    assert [p.y for p in series] == [40.0, 41.0]
    assert series.is_recovering is False


def test_clear_storage_then_recover_is_empty(store):
    series = Series("Temperature", store)
    for i in range(4):
        series.add_point(hours(i), i)
    assert series.clear_storage() == 4
    assert len(store) == 0

    fresh = Series("Temperature", store)
    assert fresh.recover_data() == 0
    assert len(fresh) == 0


def test_clear_keeps_extrema():
    series = Series("Temperature")
    series.add_point(0, 3)
    series.add_point(1, 8)
    series.clear()
    assert len(series) == 0
    assert (series.y_min, series.y_max) == (3, 8)


def test_replay_notifies_once_without_persisting(store):
    series = Series("Temperature", store)
    series.add_point(hours(0), 1)
    series.add_point(hours(1), 2)
    store.delete("Temperature_1")
    observer = RecordingObserver()
    series.subscribe(observer)

    series.replay()

    assert observer.calls == [("points", 2)]
    assert len(series) == 2
    assert store.get("Temperature_1") is None
    assert series.is_recovering is False


def test_index_of_and_average():
    series = Series("Temperature")
    series.add_point(datetime(2024, 1, 1), 10)
    series.add_point(datetime(2024, 1, 2), 20)
    assert series.index_of(Point(InstantX(datetime(2024, 1, 2)), 20.0)) == 1
    assert series.index_of(Point(InstantX(datetime(2024, 1, 3)), 20.0)) == -1
    assert series.average() == 15
    assert Series("Empty").average() is None
