from dataclasses import dataclass
from datetime import datetime

from .errors import FormatError
from .types import LogRecord


# -----------------------------
# TELEMETRY LINE PARSER
# -----------------------------

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

TOKEN_COUNT = 8

# Token positions in:
#   2024-01-01 10:00:00 device D1 event temperature value 20
DEVICE_ID_TOKEN = 3
EVENT_KIND_TOKEN = 5
EVENT_VALUE_TOKEN = 7


@dataclass(frozen=True)
class LineParser:
    """
    Turns one raw telemetry line into a LogRecord.

    The timestamp pattern is part of the parser's configuration, so two
    parsers with different patterns can live side by side.
    """
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT

    def parse(self, line: str) -> LogRecord:
        """
        Parse lines like:
          2024-01-01 10:00:00 device D1 event temperature value 20

        Tokens 2, 4 and 6 are separators and are not checked.
        """
        tokens = line.split()
        if len(tokens) != TOKEN_COUNT:
            raise FormatError(
                f"expected {TOKEN_COUNT} tokens, got {len(tokens)}",
                line,
            )

        raw_ts = f"{tokens[0]} {tokens[1]}"
        try:
            timestamp = datetime.strptime(raw_ts, self.timestamp_format)
        except ValueError as e:
            raise FormatError(f"bad timestamp {raw_ts!r}", line) from e

        # strptime also takes unpadded fields like "2024-1-1 1:0:0"
        if timestamp.strftime(self.timestamp_format) != raw_ts:
            raise FormatError(f"bad timestamp {raw_ts!r}", line)

        return LogRecord(
            timestamp=timestamp,
            device_id=tokens[DEVICE_ID_TOKEN],
            event_kind=tokens[EVENT_KIND_TOKEN],
            event_value=tokens[EVENT_VALUE_TOKEN],
        )


_DEFAULT_PARSER = LineParser()


def parse_line(line: str) -> LogRecord:
    return _DEFAULT_PARSER.parse(line)
