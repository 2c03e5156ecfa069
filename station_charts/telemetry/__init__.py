"""Series of station readings and how they are persisted and logged."""

from .logger import CsvReadingLogger
from .series import ChartObserver, Point, Series

__all__ = ["ChartObserver", "CsvReadingLogger", "Point", "Series"]
