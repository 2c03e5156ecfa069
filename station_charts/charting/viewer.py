"""Applies named view windows to a chart engine."""

from __future__ import annotations

import logging
from typing import Optional, Union

from station_charts.charting.engine import ChartEngine
from station_charts.units import XUnit
from station_charts.charting.views import ViewWindow, window_spec

logger = logging.getLogger(__name__)


class ViewController:
    """Narrows or restores the horizontal extent of one chart.

    The chart's ``x_max``, X ledger line count and unit are captured once on
    construction; the ``DEFAULT`` window (and any sentinel value of another
    window) falls back to them.
    """

    def __init__(self, engine: ChartEngine) -> None:
        self.engine = engine
        self.original_x_max = engine.x_max
        self.original_x_ledger_lines = engine.x_ledger_lines
        self.original_unit = engine.unit
        self.current: Optional[ViewWindow] = None

    def is_feasible(self, window: Union[ViewWindow, str]) -> bool:
        """Whether the series holds enough history to fill ``window``."""
        spec = window_spec(window)
        if not spec.bounded:
            return True
        series = self.engine.series
        if len(series) == 0:
            return False
        first_hours = self.engine.x_units(series.first_point.x)
        last_hours = self.engine.x_units(series.last_point.x)
        return last_hours - spec.hours >= first_hours

    def set_view(self, window: Union[ViewWindow, str]) -> bool:
        """Reconfigure and repaint the chart for ``window``.

        Returns ``False`` and leaves the chart untouched when the window
        reaches back further than the first stored point.
        """
        window = ViewWindow.parse(window)
        if not self.is_feasible(window):
            logger.info(
                "Series %s: view %s needs more history than is stored; ignoring",
                self.engine.series.id,
                window.name,
            )
            return False

        spec = window_spec(window)
        x_max = int(spec.hours) if spec.bounded else self.original_x_max
        x_ledger_lines = spec.x_ledger_lines if spec.x_ledger_lines >= 0 else self.original_x_ledger_lines
        unit = spec.unit if spec.unit is not XUnit.NUMBER else self.original_unit

        self.engine.reconfigure(x_max=x_max, x_ledger_lines=x_ledger_lines, unit=unit)
        self.current = window
        logger.debug("Series %s: switched to view %s", self.engine.series.id, window.name)
        return True

    def reset(self) -> bool:
        return self.set_view(ViewWindow.DEFAULT)
