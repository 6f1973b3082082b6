from typing import Optional


class TelemetryError(Exception):
    """Base class for failures that abort an ingestion run."""


class FormatError(TelemetryError, ValueError):
    """Raised when a line does not have the expected token shape or timestamp."""

    def __init__(
        self,
        reason: str,
        line: str,
        line_number: Optional[int] = None,
    ):
        self.reason = reason
        self.line = line
        self.line_number = line_number
        super().__init__(str(self))

    def __str__(self) -> str:
        where = f"line {self.line_number}: " if self.line_number else ""
        return f"{where}{self.reason}: {self.line!r}"

    def at_line(self, line_number: int) -> "FormatError":
        return FormatError(self.reason, self.line, line_number)


class NumericParseError(TelemetryError, ValueError):
    """Raised when a rule needs a number and the event value is not one."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"not a numeric value: {value!r}")
