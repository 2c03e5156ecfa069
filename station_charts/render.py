"""Draw chart frames with Matplotlib (Agg, no GUI toolkit needed)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from station_charts.charting.model import ChartFrame

MARKER_COLOR = "tab:blue"
AVERAGE_COLOR = "tab:red"


def visible_x_range(frame: ChartFrame) -> tuple[float, float]:
    """Content-space x interval currently inside the view."""
    width = frame.view_size[0]
    left = frame.scroll_offset - width / 2
    return left, left + width


def render_frame(frame: ChartFrame, title: Optional[str] = None, dpi: int = 100) -> Figure:
    width, height = frame.view_size
    figure = Figure(figsize=(max(width / dpi, 1.0), max(height / dpi, 1.0)), dpi=dpi)
    FigureCanvasAgg(figure)
    axis = figure.add_subplot(111)

    x_min, x_max = visible_x_range(frame)
    axis.set_xlim(x_min, x_max)
    axis.set_ylim(-height / 2, height / 2)
    axis.grid(True, linestyle="--", linewidth=0.3)

    for start, end in frame.connector_segments():
        axis.plot([start[0], end[0]], [start[1], end[1]], color=MARKER_COLOR, linewidth=1.0)
    positions = frame.marker_positions()
    if positions:
        xs, ys = zip(*positions)
        axis.scatter(xs, ys, s=12, color=MARKER_COLOR, zorder=3)

    if frame.average_line_y is not None:
        axis.axhline(frame.average_line_y, color=AVERAGE_COLOR, linestyle=":", linewidth=0.8)

    x_ticks = [label for label in frame.x_labels if x_min <= label.position <= x_max]
    axis.set_xticks([label.position for label in x_ticks])
    axis.set_xticklabels([label.text for label in x_ticks], fontsize=7)
    axis.set_yticks([label.position for label in frame.y_labels])
    axis.set_yticklabels([label.text for label in frame.y_labels], fontsize=7)

    if frame.detail is not None and frame.detail.index < len(frame.markers):
        anchor = frame.markers[frame.detail.index].position
        axis.annotate(
            f"{frame.detail.x_text}\n{frame.detail.y_text}",
            xy=(anchor.x, anchor.y),
            xytext=(8, 8),
            textcoords="offset points",
            fontsize=7,
            bbox={"boxstyle": "round", "fc": "white", "alpha": 0.8},
        )

    if title:
        axis.set_title(title)
    figure.tight_layout()
    return figure


def save_frame_png(frame: ChartFrame, path: Path, title: Optional[str] = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    figure = render_frame(frame, title=title)
    figure.savefig(path, format="png")
    return path
