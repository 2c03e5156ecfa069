from .serial_source import SerialReadingSource, parse_reading_line

__all__ = ["SerialReadingSource", "parse_reading_line"]
