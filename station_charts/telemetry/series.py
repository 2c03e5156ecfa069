"""Persistent sensor series with running extrema."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Union

from station_charts.units import InstantX, XValue, as_x_value
from station_charts.errors import DataCorruptionError
from station_charts.io.storage import KeyValueStore
from station_charts.telemetry.codec import decode_point, encode_point

logger = logging.getLogger(__name__)

RawX = Union[XValue, datetime, int, float]


@dataclass(frozen=True, slots=True)
class Point:
    """Single measurement of a series."""

    x: XValue
    y: float

    def encode(self) -> str:
        return encode_point(self.x, self.y)


class ChartObserver(Protocol):
    """What a series expects from the chart drawing it."""

    def on_point_added(self, changed: bool) -> None:
        ...

    def on_points_added(self, amount: int) -> None:
        ...


class Series:
    """Ordered points of one metric, persisted point by point to a key-value store."""

    def __init__(self, series_id: str, store: Optional[KeyValueStore] = None) -> None:
        self.id = series_id.replace(" ", "")
        self.name = series_id
        self.store = store
        self.y_min: Optional[float] = None
        self.y_max: Optional[float] = None
        self.is_recovering = False
        self._points: List[Point] = []
        self._observer: Optional[ChartObserver] = None

    # ------------------------------------------------------------------
    # Observer slot
    def subscribe(self, observer: ChartObserver) -> None:
        if self._observer is not None and self._observer is not observer:
            raise RuntimeError(f"Series '{self.id}' already has a chart attached")
        self._observer = observer

    def unsubscribe(self) -> None:
        self._observer = None

    @property
    def observer(self) -> Optional[ChartObserver]:
        return self._observer

    # ------------------------------------------------------------------
    @property
    def points(self) -> Sequence[Point]:
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    @property
    def first_point(self) -> Optional[Point]:
        return self._points[0] if self._points else None

    @property
    def last_point(self) -> Optional[Point]:
        return self._points[-1] if self._points else None

    def index_of(self, point: Point) -> int:
        """Index of the first point equal to ``point`` by value, or -1."""
        for idx, candidate in enumerate(self._points):
            if candidate == point:
                return idx
        return -1

    def average(self) -> Optional[float]:
        if not self._points:
            return None
        return sum(p.y for p in self._points) / len(self._points)

    def storage_key(self, index: int) -> str:
        return f"{self.id}_{index}"

    # ------------------------------------------------------------------
    # Mutation
    def _append(self, x: RawX, y: float, persist: bool = True) -> bool:
        value = as_x_value(x)
        if self._points and type(self._points[0].x) is not type(value):
            expected = "timestamps" if isinstance(self._points[0].x, InstantX) else "numbers"
            raise TypeError(f"Series '{self.id}' holds {expected}; cannot mix x types")
        y = float(y)

        changed = False
        if self.y_min is None or y < self.y_min:
            self.y_min = y
            changed = True
        if self.y_max is None or y > self.y_max:
            self.y_max = y
            changed = True

        point = Point(value, y)
        self._points.append(point)
        if persist and not self.is_recovering:
            self._store_point(point, len(self._points) - 1)
        return changed

    def add_point(self, x: RawX, y: float, notify: bool = True) -> bool:
        """Append a point and return whether ``y_min`` or ``y_max`` changed."""
        changed = self._append(x, y)
        if notify and self._observer is not None:
            self._observer.on_point_added(changed)
        return changed

    def add_points(self, points: Iterable[Union[Point, tuple]]) -> None:
        """Append several points and notify the chart once at the end.

        Points are stored only once the whole batch has been accepted.
        """
        batch = list(points)
        if not batch:
            return

        count_before = len(self._points)
        extrema_before = (self.y_min, self.y_max)
        try:
            for entry in batch:
                if isinstance(entry, Point):
                    self._append(entry.x, entry.y, persist=False)
                else:
                    x, y = entry
                    self._append(x, y, persist=False)
        except Exception:
            del self._points[count_before:]
            self.y_min, self.y_max = extrema_before
            raise

        if not self.is_recovering:
            for index in range(count_before, len(self._points)):
                self._store_point(self._points[index], index)

        if self._observer is not None:
            self._observer.on_points_added(len(batch))

    def clear(self) -> None:
        """Drop the in-memory points. Extrema and storage are left alone."""
        self._points.clear()

    def replay(self) -> None:
        """Re-add the current points so the attached chart redraws them from scratch.

        Nothing is persisted. If the chart fails halfway, the point list and
        extrema are put back as they were.
        """
        points = list(self._points)
        if not points:
            return
        extrema = (self.y_min, self.y_max)
        with self.recovering():
            self._points.clear()
            try:
                self.add_points(points)
            except Exception:
                self._points[:] = points
                self.y_min, self.y_max = extrema
                raise

    @contextmanager
    def recovering(self) -> Iterator["Series"]:
        """Suspend persistence while points that are already stored are re-added."""
        previous = self.is_recovering
        self.is_recovering = True
        try:
            yield self
        finally:
            self.is_recovering = previous

    # ------------------------------------------------------------------
    # Persistence
    def _store_point(self, point: Point, index: int) -> None:
        if self.store is None:
            return
        self.store.set(self.storage_key(index), point.encode())

    def _stored_entries(self) -> Iterator[tuple[str, str]]:
        if self.store is None:
            return
        index = 0
        while True:
            key = self.storage_key(index)
            raw = self.store.get(key)
            if raw is None or not raw.strip():
                return
            yield key, raw
            index += 1

    def recover_data(self) -> int:
        """Replay stored points into this series and return how many were read.

        Reading stops at the first missing index. A malformed entry raises
        :class:`DataCorruptionError` after the points decoded before it have
        been added. An entry whose x type differs from the points before it
        counts as malformed.
        """
        recovered: List[Point] = []
        with self.recovering():
            try:
                for key, raw in self._stored_entries():
                    x, y = decode_point(raw, key=key)
                    reference = self.first_point or (recovered[0] if recovered else None)
                    if reference is not None and type(reference.x) is not type(x):
                        raise DataCorruptionError(
                            f"Stored point {raw!r} does not match the x type of the series", key=key, raw=raw
                        )
                    recovered.append(Point(x, y))
            except DataCorruptionError as exc:
                logger.error("Series %s: stored data is corrupt at %s: %s", self.id, exc.key, exc)
                self.add_points(recovered)
                raise
            self.add_points(recovered)
        if recovered:
            logger.info("Series %s: recovered %d point(s)", self.id, len(recovered))
        return len(recovered)

    def clear_storage(self) -> int:
        """Delete every stored point of this series and return how many were removed."""
        keys = [key for key, _ in self._stored_entries()]
        for key in keys:
            self.store.delete(key)
        return len(keys)

    def __repr__(self) -> str:
        return f"Series(id={self.id!r}, points={len(self._points)}, y_min={self.y_min}, y_max={self.y_max})"


__all__ = ["ChartObserver", "Point", "Series"]
