from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LogRecord:
    """
    One parsed telemetry line.

    This is the ONLY structure downstream components rely on:
    - immutable once parsed
    - event_value is kept as raw text, numbers are decided later
    """
    timestamp: datetime
    device_id: str
    event_kind: str
    event_value: str


@dataclass(frozen=True)
class AnomalyFinding:
    device_id: str
    description: str
