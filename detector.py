from dataclasses import dataclass
from typing import Iterable, List, Protocol

from store import DeviceState, ERROR_EVENT
from telemetry.normalize import parse_number
from telemetry.types import AnomalyFinding, LogRecord


TEMPERATURE_EVENT = "temperature"
BATTERY_EVENT = "battery"


class AnomalyRule(Protocol):
    """
    Anything with evaluate() and describe() can be added to a RuleSet.

    `prior` is the device state before `record` is applied. Rules must
    not mutate it.
    """

    def evaluate(self, record: LogRecord, prior: DeviceState) -> bool:
        ...

    def describe(self) -> str:
        ...


def _delta_exceeds(
    record: LogRecord,
    prior: DeviceState,
    event_kind: str,
    threshold: float,
) -> bool:
    if record.event_kind != event_kind:
        return False

    previous = prior.latest_values.get(event_kind)
    if previous is None:
        return False

    current = parse_number(record.event_value)
    return abs(current - parse_number(previous)) > threshold


# ---------------- Built-in rules ----------------

@dataclass(frozen=True)
class TemperatureFluctuationRule:
    threshold: float = 5

    def evaluate(self, record: LogRecord, prior: DeviceState) -> bool:
        return _delta_exceeds(record, prior, TEMPERATURE_EVENT, self.threshold)

    def describe(self) -> str:
        return f"Temperature fluctuation over {self.threshold:g} degrees"


@dataclass(frozen=True)
class BatteryDropRule:
    # Compares the absolute change, so a jump up counts as well.
    threshold: float = 20

    def evaluate(self, record: LogRecord, prior: DeviceState) -> bool:
        return _delta_exceeds(record, prior, BATTERY_EVENT, self.threshold)

    def describe(self) -> str:
        return f"Battery level drop over {self.threshold:g}%"


@dataclass(frozen=True)
class ExcessErrorsRule:
    max_errors: int = 3

    def evaluate(self, record: LogRecord, prior: DeviceState) -> bool:
        return (
            record.event_kind == ERROR_EVENT
            and prior.error_count > self.max_errors
        )

    def describe(self) -> str:
        return f"More than {self.max_errors} errors reported"


# ---------------- Rule set ----------------

class RuleSet:
    def __init__(self, rules: Iterable[AnomalyRule] = ()):
        self.rules: List[AnomalyRule] = list(rules)

    def add(self, rule: AnomalyRule) -> "RuleSet":
        self.rules.append(rule)
        return self

    def evaluate(
        self,
        record: LogRecord,
        prior: DeviceState,
    ) -> List[AnomalyFinding]:
        """
        Run every rule against (record, prior).

        Findings come back in rule order. Numeric parse errors propagate.
        """
        return [
            AnomalyFinding(
                device_id=record.device_id,
                description=rule.describe(),
            )
            for rule in self.rules
            if rule.evaluate(record, prior)
        ]

    def __len__(self) -> int:
        return len(self.rules)

    def __bool__(self) -> bool:
        return bool(self.rules)


def default_rules(
    temperature_delta: float = 5,
    battery_delta: float = 20,
    max_errors: int = 3,
) -> RuleSet:
    return RuleSet(
        [
            TemperatureFluctuationRule(threshold=temperature_delta),
            BatteryDropRule(threshold=battery_delta),
            ExcessErrorsRule(max_errors=max_errors),
        ]
    )
