from datetime import datetime
from pathlib import Path

from station_charts.telemetry import CsvReadingLogger


def test_reading_logger(tmp_path: Path):
    log_path = tmp_path / "logs" / "readings.csv"
    logger = CsvReadingLogger(log_path, ["Temperature", "Humidity"])
    with logger:
        logger.log(datetime(2024, 1, 1, 10, 0), {"Temperature": 21.5, "Humidity": 40.0})
        logger.log_many(
            [
                (datetime(2024, 1, 1, 11, 0), {"Temperature": 22.0}),
                (datetime(2024, 1, 1, 12, 0), {"Humidity": 38.125}),
            ]
        )
    assert not logger.is_open

    text = log_path.read_text().strip().splitlines()
    assert text[0] == "timestamp,Temperature,Humidity"
    assert text[1] == "2024-01-01T10:00:00,21.500,40.000"
    assert text[2].split(",")[2] == ""
    assert text[3] == "2024-01-01T12:00:00,,38.125"


def test_header_written_once(tmp_path: Path):
    log_path = tmp_path / "readings.csv"
    for hour in (1, 2):
        with CsvReadingLogger(log_path, ["Voltage"]) as logger:
            logger.log(datetime(2024, 1, 1, hour), {"Voltage": 3.3})
    lines = log_path.read_text().strip().splitlines()
    assert lines.count("timestamp,Voltage") == 1
    assert len(lines) == 3
