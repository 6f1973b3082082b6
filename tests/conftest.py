"""Shared fixtures for the telemetry tests."""

import os

import pytest


SETTINGS_VARS = [
    "TELEMETRY_LOG_LEVEL",
    "TELEMETRY_LOG_FILE",
    "TELEMETRY_TEMPERATURE_DELTA",
    "TELEMETRY_BATTERY_DELTA",
    "TELEMETRY_MAX_ERRORS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Unset TELEMETRY_* variables for the test, including any a .env load adds."""
    names = set(SETTINGS_VARS) | {k for k in os.environ if k.startswith("TELEMETRY_")}
    for name in names:
        # setenv first so undo also removes values load_dotenv writes later
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def line():
    """Build one telemetry line in the standard layout."""
    def _line(device_id, event_kind, value, ts="2024-01-01 10:00:00"):
        return f"{ts} device {device_id} event {event_kind} value {value}"
    return _line


@pytest.fixture
def write_log(tmp_path):
    """Write lines to a log file and return its path."""
    def _write(lines, name="telemetry.log"):
        path = tmp_path / name
        path.write_text("".join(l + "\n" for l in lines), encoding="utf-8")
        return path
    return _write
