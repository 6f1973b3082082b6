import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from detector import RuleSet
from store import DeviceStateStore
from telemetry.errors import FormatError
from telemetry.ingest import open_lines
from telemetry.parsers import LineParser
from telemetry.types import AnomalyFinding


logger = logging.getLogger(__name__)


class PipelineState(Enum):
    READING = auto()
    PROCESSING = auto()
    EXHAUSTED = auto()


# ---------- Metrics ----------

@dataclass
class IngestStats:
    lines_read: int = 0
    records_parsed: int = 0
    blank_lines: int = 0
    anomalies_found: int = 0


# ---------- Result ----------

@dataclass
class IngestionResult:
    store: DeviceStateStore
    # device_id -> descriptions in discovery order, no repeats
    anomalies: Dict[str, List[str]] = field(default_factory=dict)
    stats: IngestStats = field(default_factory=IngestStats)

    def findings(self) -> List[AnomalyFinding]:
        return [
            AnomalyFinding(device_id=device_id, description=description)
            for device_id, descriptions in self.anomalies.items()
            for description in descriptions
        ]


# ---------- Ingest Pipeline ----------

class IngestionPipeline:
    """
    Sequential fold of telemetry lines into per-device state.

    Without rules (None or an empty RuleSet) it only aggregates. With
    rules, each record is checked against its device's state as it was
    before the record, and only then applied.

    Any FormatError or NumericParseError aborts the run. Nothing is
    published unless the whole input was consumed.
    """

    def __init__(
        self,
        rules: Optional[RuleSet] = None,
        parser: Optional[LineParser] = None,
    ):
        self.rules = rules
        self.parser = parser or LineParser()
        self.state = PipelineState.READING
        self.result: Optional[IngestionResult] = None

    @property
    def detecting(self) -> bool:
        return bool(self.rules)

    def run(self, lines: Iterable[str]) -> IngestionResult:
        self.state = PipelineState.READING
        self.result = None

        store = DeviceStateStore()
        anomalies: Dict[str, List[str]] = {}
        stats = IngestStats()

        for line_number, line in enumerate(lines, start=1):
            stats.lines_read += 1
            if not line.strip():
                stats.blank_lines += 1
                logger.debug("Skipping blank line %d", line_number)
                continue

            self.state = PipelineState.PROCESSING

            try:
                record = self.parser.parse(line)
            except FormatError as e:
                raise e.at_line(line_number) from e

            stats.records_parsed += 1
            state = store.get_or_create(record.device_id)

            if self.detecting:
                for finding in self.rules.evaluate(record, state):
                    known = anomalies.setdefault(record.device_id, [])
                    if finding.description in known:
                        continue
                    known.append(finding.description)
                    stats.anomalies_found += 1
                    logger.info(
                        "Anomaly on %s at %s: %s",
                        finding.device_id,
                        record.timestamp,
                        finding.description,
                    )

            store.apply(state, record)
            self.state = PipelineState.READING

        self.state = PipelineState.EXHAUSTED

        logger.info(
            "Ingestion summary: %d lines, %d records, %d devices, %d anomalies",
            stats.lines_read,
            stats.records_parsed,
            len(store),
            stats.anomalies_found,
        )

        self.result = IngestionResult(store=store, anomalies=anomalies, stats=stats)
        return self.result

    def run_file(self, path: Union[str, Path]) -> IngestionResult:
        logger.info("Reading telemetry log %s", path)
        with open_lines(path) as lines:
            return self.run(lines)
