"""X-axis units and the tagged x-value types they format."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Union

_WEEKDAYS = ("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So")
_MONTHS = (
    "Jan.",
    "Feb.",
    "März",
    "Apr.",
    "Mai",
    "Jun.",
    "Jul.",
    "Aug.",
    "Sept.",
    "Okt.",
    "Nov.",
    "Dez.",
)


@dataclass(frozen=True, slots=True)
class NumericX:
    """Plain numeric x coordinate."""

    value: float


@dataclass(frozen=True, slots=True)
class InstantX:
    """Timestamp x coordinate."""

    moment: datetime


XValue = Union[NumericX, InstantX]


def as_x_value(raw: Union[XValue, datetime, int, float]) -> XValue:
    """Wrap a raw datetime or number into its tagged x-value."""
    if isinstance(raw, (NumericX, InstantX)):
        return raw
    if isinstance(raw, datetime):
        return InstantX(raw)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise TypeError(f"x must be a datetime or a number, got {type(raw).__name__}")
    return NumericX(float(raw))


def x_to_hours(x: XValue, origin: XValue) -> float:
    """Position of ``x`` on the chart's unit axis.

    Numbers are used as they are. Instants become the hours elapsed since
    ``origin`` (the first point of the series), rounded to three decimals.
    """
    if isinstance(x, NumericX):
        return x.value
    if not isinstance(origin, InstantX):
        raise TypeError("instant x-values need an instant origin")
    hours = (x.moment - origin.moment).total_seconds() / 3600.0
    return round(hours, 3)


def x_from_hours(hours: float, origin: XValue) -> XValue:
    """Inverse of :func:`x_to_hours`."""
    if isinstance(origin, InstantX):
        return InstantX(origin.moment + timedelta(hours=hours))
    return NumericX(hours)


def format_number(value: float, decimals: int = 1) -> str:
    """Round to ``decimals`` places and drop trailing zeros."""
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


class XUnit(Enum):
    """Units the x axis can be labelled in."""

    HOURS = "hours"
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"
    NUMBER = "number"

    @property
    def hours(self) -> int:
        return _UNIT_HOURS[self]

    @property
    def is_time(self) -> bool:
        return self is not XUnit.NUMBER

    @classmethod
    def parse(cls, name: str) -> "XUnit":
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            try:
                return cls[str(name).strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown x unit '{name}'") from None

    def label(self, moment: datetime) -> Optional[str]:
        """Axis label for ``moment`` at this unit's granularity."""
        if self is XUnit.HOURS:
            return moment.strftime("%H:%M")
        if self is XUnit.DAYS:
            return f"{moment.day}.{moment.month} ({_WEEKDAYS[moment.weekday()]})"
        if self is XUnit.MONTHS:
            return f"{_MONTHS[moment.month - 1]} {moment.year}"
        if self is XUnit.YEARS:
            return str(moment.year)
        return None

    def detailed(self, x: XValue) -> str:
        """Full text for a single point, used by the point detail overlay."""
        if isinstance(x, NumericX):
            return format_number(x.value, 4)
        if self is XUnit.NUMBER:
            return x.moment.isoformat(sep=" ")
        return x.moment.strftime("%d.%m.%Y  %H:%M")


_UNIT_HOURS = {
    XUnit.HOURS: 1,
    XUnit.DAYS: 24,
    XUnit.MONTHS: 24 * 28,
    XUnit.YEARS: 24 * 365,
    XUnit.NUMBER: 1,
}


def x_display(x: XValue, unit: XUnit, decimals: int = 1) -> str:
    """Axis label text for ``x``."""
    if isinstance(x, InstantX) and unit.is_time:
        return unit.label(x.moment) or ""
    if isinstance(x, InstantX):
        return x.moment.strftime("%H:%M")
    return format_number(x.value, decimals)
