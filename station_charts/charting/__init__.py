"""Chart geometry: coordinate engine, render data and view windows."""

from .engine import ChartEngine
from .model import (
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
from .viewer import ViewController
from .views import ViewWindow, WindowSpec, window_spec

__all__ = [
    "AxisLabel",
    "ChartConfig",
    "ChartEngine",
    "ChartFrame",
    "ChartState",
    "Connector",
    "Marker",
    "PointDetail",
    "ScaleRegime",
    "ScreenPoint",
    "ViewController",
    "ViewWindow",
    "WindowSpec",
    "window_spec",
]
