from dataclasses import dataclass, field
from typing import Dict, List, Optional

from telemetry.types import LogRecord


ERROR_EVENT = "error"


@dataclass
class DeviceState:
    device_id: str
    error_count: int = 0
    # event_kind -> raw value of the last record of that kind; never holds "error"
    latest_values: Dict[str, str] = field(default_factory=dict)


class DeviceStateStore:
    def __init__(self):
        # dicts keep insertion order, i.e. first-sighting order of devices
        self._states: Dict[str, DeviceState] = {}

    # ---------- Write API ----------

    def get_or_create(self, device_id: str) -> DeviceState:
        state = self._states.get(device_id)
        if state is None:
            state = DeviceState(device_id=device_id)
            self._states[device_id] = state
        return state

    def apply(self, state: DeviceState, record: LogRecord):
        """
        Fold one record into its device's state.

        The only place device state changes. Callers evaluate anomaly
        rules first so the rules see the state as of the previous record.
        """
        if record.event_kind == ERROR_EVENT:
            state.error_count += 1
        else:
            state.latest_values[record.event_kind] = record.event_value

    # ---------- Read APIs ----------

    def get(self, device_id: str) -> Optional[DeviceState]:
        return self._states.get(device_id)

    def states(self) -> List[DeviceState]:
        return list(self._states.values())

    def ordered_by_errors(self) -> List[DeviceState]:
        """
        Devices by ascending error count.
        sorted() is stable, so ties keep first-sighting order.
        """
        return sorted(self._states.values(), key=lambda s: s.error_count)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, device_id: str) -> bool:
        return device_id in self._states
