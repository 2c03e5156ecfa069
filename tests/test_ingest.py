import pytest

from station_charts.ingest import SerialReadingSource, parse_reading_line

NAMES = ["Temperature", "Humidity", "Voltage"]


class FakeSerial:
    def __init__(self, lines):
        self._lines = list(lines)
        self.timeout = 1.0
        self.is_open = True
        self.written = []

    def write(self, data):
        self.written.append(data)

    def readline(self):
        if not self._lines:
            self.is_open = False
            return b""
        return self._lines.pop(0)

    def close(self):
        self.is_open = False


def test_parse_plain_line():
    assert parse_reading_line("21.5;40.2;3.31\n", NAMES) == {
        "Temperature": 21.5,
        "Humidity": 40.2,
        "Voltage": 3.31,
    }


def test_parse_tagged_line():
    assert parse_reading_line("temp;-3.5;hum;80;volt;3.1", NAMES) == {
        "Temperature": -3.5,
        "Humidity": 80.0,
        "Voltage": 3.1,
    }


@pytest.mark.parametrize("line", ["", "21.5;40.2", "21.5;40.2;3.3;1", "21.5;wet;3.3"])
def test_parse_rejects_bad_lines(line):
    with pytest.raises(ValueError):
        parse_reading_line(line, NAMES)


def test_serial_source_handshake_and_lines():
    fake = FakeSerial([b"21.5;40.2;3.31\r\n", b"\r\n", b"22.0;41.0;3.30\n"])
    with SerialReadingSource("/dev/null", connection=fake) as source:
        lines = list(source.lines())
    assert lines == ["21.5;40.2;3.31", "22.0;41.0;3.30"]
    assert fake.written[0] == b"openBT\n"
    # port was already closed by the peer, so no goodbye is sent
    assert fake.written == [b"openBT\n"]


def test_serial_source_says_goodbye_on_close():
    fake = FakeSerial([b"1;2;3\n"])
    source = SerialReadingSource("/dev/null", connection=fake)
    assert source.readline(timeout=0.5) == "1;2;3"
    assert fake.timeout == 0.5
    source.close()
    source.close()
    assert fake.written == [b"openBT\n", b"closeBT\n"]
    assert fake.is_open is False
