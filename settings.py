import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


ENV_PREFIX = "TELEMETRY_"


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.WARNING
    log_file: Optional[str] = None
    temperature_delta: float = 5
    battery_delta: float = 20
    max_errors: int = 3


def parse_log_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {name!r}")
    return level


def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_number(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{ENV_PREFIX}{name} must not be negative, got {raw!r}")
    return value


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """
    Build Settings from the environment.

    A .env file (or `dotenv_path`) is loaded first; variables already set
    in the environment win over it.
    """
    load_dotenv(dotenv_path)

    defaults = Settings()
    level = _env("LOG_LEVEL")
    max_errors = _env_number("MAX_ERRORS", defaults.max_errors)
    if max_errors != int(max_errors):
        raise ValueError(f"{ENV_PREFIX}MAX_ERRORS must be a whole number, got {max_errors!r}")

    return Settings(
        log_level=parse_log_level(level) if level else defaults.log_level,
        log_file=_env("LOG_FILE"),
        temperature_delta=_env_number("TEMPERATURE_DELTA", defaults.temperature_delta),
        battery_delta=_env_number("BATTERY_DELTA", defaults.battery_delta),
        max_errors=int(max_errors),
    )
