#!/usr/bin/env python3
"""Render PNG snapshots of the stored station series."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from station_charts.charting import ViewWindow
from station_charts.io import load_settings
from station_charts.render import save_frame_png
from station_charts.station import StationHub

logger = logging.getLogger("render_charts")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--settings", help="Optional path to a settings YAML file.")
    parser.add_argument(
        "--view",
        default=ViewWindow.DEFAULT.value,
        choices=[window.value for window in ViewWindow],
        help="View window applied before rendering.",
    )
    parser.add_argument("--output", default="charts", help="Directory the PNG files are written to.")
    parser.add_argument("--keep-entire-graph", action="store_true", help="Fit the whole series into the view.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
    settings = load_settings(args.settings) if args.settings else load_settings()

    hub = StationHub.from_settings(settings)
    failures = [name for name, error in hub.start().items() if error is not None]
    if args.keep_entire_graph:
        for chart in hub:
            chart.engine.set_keep_entire_graph(True)
    accepted = hub.set_view(args.view)

    output = Path(args.output)
    for chart in hub:
        if not accepted[chart.series.id]:
            logger.info("Series %s: rendering with its previous view", chart.series.id)
        path = save_frame_png(chart.engine.frame(), output / f"{chart.series.id}.png", title=chart.series.name)
        logger.info("Wrote %s", path)
    hub.stop()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
