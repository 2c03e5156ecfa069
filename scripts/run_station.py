#!/usr/bin/env python3
"""Read the station's serial link and keep the series and their charts up to date."""

from __future__ import annotations

import argparse
import logging
import sys

import serial

from station_charts.ingest import SerialReadingSource
from station_charts.io import load_settings
from station_charts.station import StationHub

logger = logging.getLogger("run_station")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--settings", help="Optional path to a settings YAML file.")
    parser.add_argument("--port", help="Serial port of the station (overrides the settings file).")
    parser.add_argument("--baud", type=int, help="Baud rate (overrides the settings file).")
    parser.add_argument("--max-readings", type=int, default=0, help="Stop after this many readings (0 = run forever).")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = load_settings(args.settings) if args.settings else load_settings()
    log_section = settings.get("logging", {}) or {}
    logging.basicConfig(
        level=getattr(logging, str(log_section.get("level", "INFO")).upper(), logging.INFO),
        format="%(levelname)s: %(name)s: %(message)s",
    )

    serial_section = settings.get("serial", {}) or {}
    port = args.port or serial_section.get("port")
    if not port:
        raise SystemExit("No serial port given. Pass --port or set serial.port in the settings file.")
    baudrate = args.baud or int(serial_section.get("baudrate", 9600))
    timeout = float(serial_section.get("timeout", 1.0))

    hub = StationHub.from_settings(settings)
    hub.start()

    count = 0
    try:
        with SerialReadingSource(port, baudrate=baudrate, timeout=timeout) as source:
            for line in source.lines():
                if hub.ingest_line(line) is None:
                    continue
                count += 1
                if args.max_readings and count >= args.max_readings:
                    break
    except serial.SerialException as exc:
        logger.error("Serial link failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        hub.stop()
        logger.info("Ingested %d reading(s)", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
