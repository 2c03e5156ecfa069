"""Named time windows a chart can be narrowed to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from station_charts.units import XUnit

UNBOUNDED = -1


class ViewWindow(Enum):
    LAST_24_HOURS = "last_24_hours"
    LAST_7_DAYS = "last_7_days"
    LAST_28_DAYS = "last_28_days"
    LAST_3_MONTHS = "last_3_months"
    LAST_6_MONTHS = "last_6_months"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: Union["ViewWindow", str]) -> "ViewWindow":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls[text.upper()]
        except KeyError:
            try:
                return cls(text.lower())
            except ValueError:
                raise ValueError(f"Unknown view window '{value}'") from None


@dataclass(frozen=True, slots=True)
class WindowSpec:
    """Chart settings a window asks for. ``-1``/``NUMBER`` keep the chart's own value."""

    hours: float
    x_ledger_lines: int
    unit: XUnit

    @property
    def bounded(self) -> bool:
        return self.hours != UNBOUNDED


_WINDOWS = {
    ViewWindow.LAST_24_HOURS: WindowSpec(24 * XUnit.HOURS.hours, 6 - 1, XUnit.HOURS),
    ViewWindow.LAST_7_DAYS: WindowSpec(7 * XUnit.DAYS.hours, 7 - 1, XUnit.DAYS),
    ViewWindow.LAST_28_DAYS: WindowSpec(28 * XUnit.DAYS.hours, 4 - 1, XUnit.DAYS),
    ViewWindow.LAST_3_MONTHS: WindowSpec(3 * XUnit.MONTHS.hours, 3 - 1, XUnit.MONTHS),
    ViewWindow.LAST_6_MONTHS: WindowSpec(6 * XUnit.MONTHS.hours, 6 - 1, XUnit.MONTHS),
    ViewWindow.DEFAULT: WindowSpec(UNBOUNDED, UNBOUNDED, XUnit.NUMBER),
}


def window_spec(window: Union[ViewWindow, str]) -> WindowSpec:
    return _WINDOWS[ViewWindow.parse(window)]


def window_hours(window: Union[ViewWindow, str]) -> float:
    return window_spec(window).hours


def window_ledger_lines(window: Union[ViewWindow, str]) -> int:
    return window_spec(window).x_ledger_lines


def window_unit(window: Union[ViewWindow, str]) -> XUnit:
    return window_spec(window).unit
