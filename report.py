import json
from typing import Any, Dict, List, Mapping, Optional

from store import DeviceStateStore
from telemetry.normalize import coerce_value


# ---------- Views ----------

def device_snapshot_view(store: DeviceStateStore) -> Dict[str, Dict[str, Any]]:
    """
    {device_id: {"error_count": n, <event_kind>: value, ...}}

    Numeric-looking values are rendered as numbers, the rest as strings.
    """
    view: Dict[str, Dict[str, Any]] = {}

    for state in store.states():
        node: Dict[str, Any] = {"error_count": state.error_count}
        for event_kind, raw in state.latest_values.items():
            node[event_kind] = coerce_value(raw)
        view[state.device_id] = node

    return view


def anomaly_view(anomalies: Mapping[str, List[str]]) -> Dict[str, Dict[str, List[str]]]:
    return {
        "anomalies": {
            device_id: list(descriptions)
            for device_id, descriptions in anomalies.items()
            if descriptions
        }
    }


def errors_ranking_view(store: DeviceStateStore) -> List[Dict[str, Any]]:
    return [
        {"device_id": state.device_id, "error_count": state.error_count}
        for state in store.ordered_by_errors()
    ]


# ---------- Rendering ----------

def render_json(tree: Any) -> str:
    return json.dumps(tree, indent=2, ensure_ascii=False)


def print_json(tree: Optional[Any]):
    if tree is None:
        print("No data available.")
        return
    print(render_json(tree))
