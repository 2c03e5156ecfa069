"""Coordinate engine that turns a series into chart geometry.

The engine never draws anything itself. It keeps markers, connectors, axis
labels and scroll state in sync with its series and hands them out as a
:class:`~station_charts.charting.model.ChartFrame`.

Screen positions are in content space: the origin is the centre of the view
when the content is scrolled fully to the left, y grows upwards. A
presentation layer shifts everything left by ``scroll_offset``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional

from station_charts.charting.model import (
    AxisLabel,
    ChartConfig,
    ChartFrame,
    ChartState,
    Connector,
    Marker,
    PointDetail,
    ScaleRegime,
    ScreenPoint,
)
from station_charts.units import XUnit, XValue, format_number, x_display, x_from_hours, x_to_hours
from station_charts.telemetry.series import Point, Series

logger = logging.getLogger(__name__)

# Distance from the right edge within which the view keeps following new points.
SCROLL_SNAP_PX = 10.0

ORIGIN = ScreenPoint(0.0, 0.0)


class ChartEngine:
    """Keeps the chart geometry of one series up to date."""

    _STATE_FIELDS = (
        "config",
        "shown",
        "width_per_unit",
        "min_width_per_unit",
        "max_x_reached",
        "_first_lock_labelled",
        "_markers",
        "_connectors",
        "_x_labels",
        "_y_labels",
        "_average_line_y",
        "_content_width",
        "_scroll_offset",
        "_detail",
    )

    def __init__(self, series: Series, config: ChartConfig) -> None:
        config.validate()
        self.series = series
        self.config = config
        self.shown = False
        self.max_x_reached = False
        self._first_lock_labelled = False

        self._markers: List[Marker] = []
        self._connectors: List[Connector] = []
        self._x_labels: List[AxisLabel] = []
        self._y_labels: List[AxisLabel] = []
        self._average_line_y: Optional[float] = None
        self._content_width = config.width
        self._scroll_offset = 0.0
        self._detail: Optional[PointDetail] = None

        self.min_width_per_unit = config.width / config.x_max
        self.width_per_unit = config.width

        series.subscribe(self)
        self._update_width_per_unit(False)

    # ------------------------------------------------------------------
    # Configuration
    @property
    def width(self) -> float:
        return self.config.width

    @property
    def height(self) -> float:
        return self.config.height

    @property
    def y_distance(self) -> float:
        return self.config.y_distance

    @property
    def x_max(self) -> int:
        return self.config.x_max

    @property
    def unit(self) -> XUnit:
        return self.config.unit

    @property
    def x_ledger_lines(self) -> int:
        return self.config.x_ledger_lines

    @property
    def y_ledger_lines(self) -> int:
        return self.config.y_ledger_lines

    @property
    def keep_entire_graph(self) -> bool:
        return self.config.keep_entire_graph

    @property
    def regime(self) -> ScaleRegime:
        return ScaleRegime.LOCKED if self._scale_locked() else ScaleRegime.FIT_TO_VIEW

    def reconfigure(self, **changes: Any) -> None:
        """Change configuration fields and repaint.

        Invalid values raise :class:`ConfigurationError` before anything
        changes. If the repaint fails, the previous state is restored.
        """
        new_config = self.config.with_changes(**changes)
        snapshot = self._snapshot()
        self.config = new_config
        try:
            self._rebuild()
        except Exception:
            self._restore(snapshot)
            raise

    def set_keep_entire_graph(self, keep: bool) -> None:
        self.reconfigure(keep_entire_graph=bool(keep))

    # ------------------------------------------------------------------
    # Coordinate transform
    def x_units(self, x: XValue) -> float:
        """Position of ``x`` along the unit axis (hours since the first point for instants)."""
        first = self.series.first_point
        if first is None:
            return 0.0
        return x_to_hours(x, first.x)

    def x_span(self) -> float:
        """Distance between the first and last point in axis units (at least something positive)."""
        if len(self.series) <= 1:
            return 1.0
        span = self.x_units(self.series.last_point.x) - self.x_units(self.series.first_point.x)
        return span if span > 0 else 1.0

    def y_percent(self, y: float) -> float:
        """Where ``y`` sits between the series extrema (0 at the minimum, 1 at the maximum)."""
        y_min, y_max = self.series.y_min, self.series.y_max
        if y_min is None or y_max is None or y_max == y_min:
            return 0.5
        return (y - y_min) / (y_max - y_min)

    def _y_to_screen(self, y: float) -> float:
        return -self.height / 2 + self.y_percent(y) * (self.height - self.y_distance)

    def domain_to_screen(self, point: Point) -> ScreenPoint:
        if len(self.series) < 2:
            return ORIGIN
        x = self.x_units(point.x) * self.width_per_unit - self.width / 2
        return ScreenPoint(x, self._y_to_screen(point.y))

    def screen_to_domain(self, position: ScreenPoint) -> Point:
        first = self.series.first_point
        if first is None:
            raise ValueError(f"Series '{self.series.id}' has no points to map onto")
        span = self.x_span()
        percent_x = (position.x + self.width / 2) / (span * self.width_per_unit)
        x = x_from_hours(percent_x * span, first.x)

        y_min, y_max = self.series.y_min, self.series.y_max
        percent_y = (position.y + self.height / 2) / (self.height - self.y_distance)
        y = y_min + percent_y * (y_max - y_min)
        return Point(x, y)

    # ------------------------------------------------------------------
    # Scale
    def _scale_locked(self) -> bool:
        return self.max_x_reached and not self.keep_entire_graph

    def _fit_to_view(self) -> bool:
        return not self._scale_locked()

    def _update_width_per_unit(self, changed: bool) -> None:
        if self._fit_to_view():
            scale = self.width / self.x_span()
            if scale <= self.min_width_per_unit and not self.keep_entire_graph:
                scale = self.min_width_per_unit
                if not self.max_x_reached:
                    logger.debug("Series %s: scale locked at %.4f px/unit", self.series.id, scale)
                self.max_x_reached = True
            self.width_per_unit = scale
            self._update_graph()
            return
        if changed:
            self._update_graph()

    def _update_graph(self) -> None:
        """Reposition every marker and connector, e.g. after the scale or extrema changed."""
        if len(self.series) <= 1 or not self._markers:
            return
        points = self.series.points
        for i, marker in enumerate(self._markers):
            marker.position = self.domain_to_screen(points[i])
            if 0 < i <= len(self._connectors):
                self._connectors[i - 1] = Connector(self._markers[i - 1].position, marker.position)
        self._update_y_labels()

    # ------------------------------------------------------------------
    # Lifecycle
    def show(self) -> None:
        if self.shown:
            return
        snapshot = self._snapshot()
        self.shown = True
        try:
            self._rebuild()
        except Exception:
            self._restore(snapshot)
            raise

    def close(self) -> None:
        if not self.shown:
            return
        self.shown = False
        self._markers = []
        self._connectors = []
        self._average_line_y = None
        self._detail = None

    def repaint(self) -> None:
        """Throw away all derived geometry and redraw the whole series."""
        snapshot = self._snapshot()
        try:
            self._rebuild()
        except Exception:
            self._restore(snapshot)
            raise

    def _rebuild(self) -> None:
        self._detail = None
        self._markers = []
        self._connectors = []
        self._average_line_y = None
        self._content_width = self.width
        self._scroll_offset = 0.0

        self.min_width_per_unit = self.width / self.x_max
        self.width_per_unit = self.width
        self.max_x_reached = False
        self._first_lock_labelled = False

        self._layout_axis_labels()
        self._update_width_per_unit(False)

        if self.shown:
            self.series.replay()
        self.scroll_to_latest()

    def _snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy({name: getattr(self, name) for name in self._STATE_FIELDS})

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

    # ------------------------------------------------------------------
    # Series notifications
    def on_point_added(self, changed: bool) -> None:
        if not self.shown:
            return
        count = len(self.series)
        if count == 0:
            return

        self._update_width_per_unit(changed)

        if count > 1:
            self._draw_connector(count - 2, count - 1)
        self._draw_marker(count - 1)

        self._update_scroll_view()
        self._update_x_labels()
        self._update_y_labels()
        self._update_average_line()

    def on_points_added(self, amount: int) -> None:
        if not self.shown or amount <= 0:
            return
        self._update_width_per_unit(True)

        count = len(self.series)
        for i in range(count - amount, count - 1):
            if i > 0:
                self._draw_connector(i - 1, i)
            self._draw_marker(i)

        self.on_point_added(True)

    def _draw_marker(self, index: int) -> None:
        self._markers.append(Marker(index, self.domain_to_screen(self.series[index])))

    def _draw_connector(self, start: int, end: int) -> None:
        self._connectors.append(
            Connector(self.domain_to_screen(self.series[start]), self.domain_to_screen(self.series[end]))
        )

    # ------------------------------------------------------------------
    # Scrolling
    @property
    def content_width(self) -> float:
        return self._content_width

    @property
    def scroll_offset(self) -> float:
        return self._scroll_offset

    def max_scroll_offset(self) -> float:
        return max(0.0, self._content_width - self.width)

    def scroll_to(self, offset: float) -> None:
        self._scroll_offset = min(max(0.0, float(offset)), self.max_scroll_offset())

    def scroll_to_latest(self) -> None:
        self._scroll_offset = self.max_scroll_offset()

    def _update_scroll_view(self) -> None:
        """Grow the content with the series once the scale is locked."""
        if self.keep_entire_graph or not self.max_x_reached:
            return
        first = self.domain_to_screen(self.series.first_point)
        last = self.domain_to_screen(self.series.last_point)
        following = self._scroll_offset >= self.max_scroll_offset() - SCROLL_SNAP_PX

        self._content_width = max(self.width, abs(last.x - first.x))
        if following:
            self.scroll_to_latest()

    # ------------------------------------------------------------------
    # Axis labels
    def label_spacing(self) -> float:
        return self.width / (self.x_ledger_lines + 1)

    def _layout_axis_labels(self) -> None:
        step = self.label_spacing()
        self._x_labels = [AxisLabel(step * (i + 1) - self.width / 2) for i in range(self.x_ledger_lines)]

        y_part = (self.height - self.y_distance) / (self.y_ledger_lines - 1)
        self._y_labels = [AxisLabel(y_part * i - self.height / 2) for i in range(self.y_ledger_lines)]

    def _x_label_text(self, position: float) -> str:
        x = self.screen_to_domain(ScreenPoint(position, 0.0)).x
        return x_display(x, self.unit, self.config.round_decimal_places)

    def _relabel_x(self) -> None:
        for label in self._x_labels:
            label.text = self._x_label_text(label.position)

    def _update_x_labels(self) -> None:
        if len(self.series) == 0:
            return
        if self._fit_to_view():
            self._relabel_x()
            return

        if not self._first_lock_labelled:
            self._relabel_x()
            self._first_lock_labelled = True

        step = self.label_spacing()
        last = self._x_labels[-1].position if self._x_labels else -self.width / 2
        gap = self._content_width - last - self.width / 2
        for i in range(int(gap / step)):
            position = last + step * (i + 1)
            self._x_labels.append(AxisLabel(position, self._x_label_text(position)))

    def _update_y_labels(self) -> None:
        y_min, y_max = self.series.y_min, self.series.y_max
        if y_min is None or not self._y_labels:
            return
        step = (y_max - y_min) / (len(self._y_labels) - 1)
        for i, label in enumerate(self._y_labels):
            label.text = format_number(y_min + step * i, self.config.round_decimal_places)

    def _update_average_line(self) -> None:
        average = self.series.average()
        if average is None:
            self._average_line_y = None
            return
        self._average_line_y = self.domain_to_screen(Point(self.series.first_point.x, average)).y

    # ------------------------------------------------------------------
    # Point detail overlay
    @property
    def detail(self) -> Optional[PointDetail]:
        return self._detail

    def show_point_detail(self, index: int) -> PointDetail:
        point = self.series[index]
        self._detail = PointDetail(
            index=index,
            x_text=self.unit.detailed(point.x),
            y_text=f"{point.y:g}",
        )
        return self._detail

    def show_detail_for(self, point: Point) -> Optional[PointDetail]:
        """Open the overlay for ``point`` if it belongs to the series."""
        index = self.series.index_of(point)
        if index < 0:
            return None
        return self.show_point_detail(index)

    def hide_point_detail(self) -> None:
        self._detail = None

    def on_pointer_down(self) -> None:
        self.hide_point_detail()

    # ------------------------------------------------------------------
    def frame(self) -> ChartFrame:
        return ChartFrame(
            view_size=(self.width, self.height),
            markers=tuple(Marker(m.index, m.position) for m in self._markers),
            connectors=tuple(Connector(c.start, c.end) for c in self._connectors),
            x_labels=tuple(AxisLabel(label.position, label.text) for label in self._x_labels),
            y_labels=tuple(AxisLabel(label.position, label.text) for label in self._y_labels),
            average_line_y=self._average_line_y,
            content_width=self._content_width,
            scroll_offset=self._scroll_offset,
            state=ChartState.SHOWN if self.shown else ChartState.HIDDEN,
            regime=self.regime,
            detail=self._detail,
        )
