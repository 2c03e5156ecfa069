"""Serial link to the station's microcontroller.

The controller sends one line per reading, ``"<temperature>;<humidity>;<voltage>"``.
Older firmware prefixes each value with a tag (``"temp;21.5;hum;40;volt;3.3"``).
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Sequence

import serial

logger = logging.getLogger(__name__)

SEPARATOR = ";"
VALUE_TAGS = ("temp", "hum", "volt")
OPEN_COMMAND = "openBT"
CLOSE_COMMAND = "closeBT"


def parse_reading_line(line: str, names: Sequence[str]) -> Dict[str, float]:
    """Split a reading line into ``{name: value}`` in the order of ``names``.

    Raises ``ValueError`` if the number of values does not match or a value
    is not a number.
    """
    fields = [field.strip() for field in line.strip().split(SEPARATOR)]
    values = [field for field in fields if field and field.lower() not in VALUE_TAGS]
    if len(values) != len(names):
        raise ValueError(f"Expected {len(names)} value(s) but got {len(values)} in {line!r}")
    try:
        return {name: float(value) for name, value in zip(names, values)}
    except ValueError as exc:
        raise ValueError(f"Non-numeric value in reading {line!r}") from exc


class SerialReadingSource:
    """Reads reading lines from an RS-232/Bluetooth serial port."""

    def __init__(
        self,
        port: str,
        baudrate: int = 9600,
        timeout: float = 1.0,
        connection: Optional[serial.Serial] = None,
    ) -> None:
        self.port = port
        self._serial = connection if connection is not None else serial.Serial(
            port=port, baudrate=baudrate, timeout=timeout
        )
        self.send(OPEN_COMMAND)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def send(self, data: str) -> None:
        if not data:
            return
        if not data.endswith("\n"):
            data += "\n"
        self._serial.write(data.encode("ascii"))

    def readline(self, timeout: Optional[float] = None) -> str:
        if timeout is not None:
            self._serial.timeout = timeout
        raw = self._serial.readline()
        return raw.decode("ascii", errors="ignore").strip()

    def lines(self) -> Iterator[str]:
        """Yield non-empty lines until the port is closed."""
        while self._serial is not None and self._serial.is_open:
            line = self.readline()
            if line:
                yield line

    def close(self) -> None:
        if self._serial is None:
            return
        try:
            if self._serial.is_open:
                self.send(CLOSE_COMMAND)
        finally:
            self._serial.close()
            self._serial = None
