"""Render data exchanged between the chart engine and a presentation layer."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, List, Mapping, Optional, Tuple

from station_charts.units import XUnit
from station_charts.errors import ConfigurationError


class ChartState(Enum):
    """Visibility of a chart."""

    HIDDEN = auto()
    SHOWN = auto()


class ScaleRegime(Enum):
    """How the horizontal scale currently behaves."""

    FIT_TO_VIEW = auto()
    LOCKED = auto()


@dataclass(frozen=True, slots=True)
class ScreenPoint:
    """Position in screen space, origin at the centre of the view."""

    x: float
    y: float

    def distance_to(self, other: "ScreenPoint") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(slots=True)
class Marker:
    """Circle drawn for one point of the series."""

    index: int
    position: ScreenPoint


@dataclass(slots=True)
class Connector:
    """Line segment joining two consecutive markers."""

    start: ScreenPoint
    end: ScreenPoint

    @property
    def midpoint(self) -> ScreenPoint:
        return ScreenPoint((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def angle(self) -> float:
        """Rotation in degrees, in the range [-90, 90]."""
        dx = self.end.x - self.start.x
        dy = self.end.y - self.start.y
        if dx == 0:
            if dy == 0:
                return 0.0
            return 90.0 if dy > 0 else -90.0
        return math.degrees(math.atan(dy / dx))


@dataclass(slots=True)
class AxisLabel:
    """Ledger line position plus its text (empty until data arrives)."""

    position: float
    text: str = ""


@dataclass(frozen=True, slots=True)
class PointDetail:
    """Overlay describing a single selected point."""

    index: int
    x_text: str
    y_text: str


@dataclass(frozen=True, slots=True)
class ChartFrame:
    """Immutable snapshot of everything a presentation layer needs to draw."""

    view_size: Tuple[float, float]
    markers: Tuple[Marker, ...] = ()
    connectors: Tuple[Connector, ...] = ()
    x_labels: Tuple[AxisLabel, ...] = ()
    y_labels: Tuple[AxisLabel, ...] = ()
    average_line_y: Optional[float] = None
    content_width: float = 0.0
    scroll_offset: float = 0.0
    state: ChartState = ChartState.HIDDEN
    regime: ScaleRegime = ScaleRegime.FIT_TO_VIEW
    detail: Optional[PointDetail] = None

    def marker_positions(self) -> List[Tuple[float, float]]:
        return [(m.position.x, m.position.y) for m in self.markers]

    def connector_segments(self) -> List[Tuple[Tuple[float, float], Tuple[float, float]]]:
        return [((c.start.x, c.start.y), (c.end.x, c.end.y)) for c in self.connectors]


@dataclass(slots=True)
class ChartConfig:
    """Geometry and axis configuration of one chart."""

    width: float
    height: float
    x_max: int
    y_distance: float = 20.0
    x_ledger_lines: int = 5
    y_ledger_lines: int = 5
    unit: XUnit = XUnit.HOURS
    round_decimal_places: int = 1
    keep_entire_graph: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Chart size must be positive, got {self.width}x{self.height}")
        if self.x_max <= 0:
            raise ConfigurationError(f"x_max must be positive, got {self.x_max}")
        if not 0 <= self.y_distance < self.height:
            raise ConfigurationError(f"y_distance must lie in [0, {self.height}), got {self.y_distance}")
        if self.x_ledger_lines < 1:
            raise ConfigurationError(f"x_ledger_lines must be at least 1, got {self.x_ledger_lines}")
        if self.y_ledger_lines < 2:
            raise ConfigurationError(f"y_ledger_lines must be at least 2, got {self.y_ledger_lines}")
        if not 1 <= self.round_decimal_places <= 4:
            raise ConfigurationError(
                f"round_decimal_places must lie in 1..4, got {self.round_decimal_places}"
            )
        if not isinstance(self.unit, XUnit):
            raise ConfigurationError(f"unit must be an XUnit, got {self.unit!r}")

    def with_changes(self, **changes: Any) -> "ChartConfig":
        """Validated copy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ChartConfig":
        """Build a config from a ``chart:`` settings section."""
        try:
            width = float(data["width"])
            height = float(data["height"])
            x_max = int(data["x_max"])
        except KeyError as exc:
            raise ConfigurationError(f"Missing required chart setting {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid chart geometry: {exc}") from exc
        try:
            unit = XUnit.parse(data.get("unit", "hours"))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        try:
            return cls(
                width=width,
                height=height,
                x_max=x_max,
                y_distance=float(data.get("y_distance", 20.0)),
                x_ledger_lines=int(data.get("x_ledger_lines", 5)),
                y_ledger_lines=int(data.get("y_ledger_lines", 5)),
                unit=unit,
                round_decimal_places=int(data.get("round_decimal_places", 1)),
                keep_entire_graph=bool(data.get("keep_entire_graph", False)),
            )
        except (TypeError, ValueError) as exc:
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid chart setting: {exc}") from exc
