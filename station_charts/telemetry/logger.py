"""CSV log of raw station readings."""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Tuple


class CsvReadingLogger:
    """Appends one row per reading: the timestamp followed by one column per series."""

    def __init__(self, path: Path, columns: Sequence[str], write_header: bool = True) -> None:
        self.path = Path(path)
        self.columns = list(columns)
        self._file = None
        self._writer = None
        self._write_header = write_header

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        exists = self.path.exists() and self.path.stat().st_size > 0
        self._file = self.path.open("a", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        if self._write_header and not exists:
            self._writer.writerow(["timestamp", *self.columns])

    def close(self) -> None:
        if self._file:
            self._file.close()
        self._file = None
        self._writer = None

    def log(self, timestamp: datetime, values: Mapping[str, Optional[float]]) -> None:
        if not self._writer:
            self.open()
        row = [timestamp.isoformat(timespec="seconds")]
        for column in self.columns:
            value = values.get(column)
            row.append("" if value is None else f"{value:.3f}")
        self._writer.writerow(row)
        self._file.flush()

    def log_many(self, readings: Iterable[Tuple[datetime, Mapping[str, Optional[float]]]]) -> None:
        for timestamp, values in readings:
            self.log(timestamp, values)
