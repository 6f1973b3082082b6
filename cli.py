import argparse
import logging
import sys
from typing import List, Optional

from detector import default_rules
from logger_config import setup_logger
from pipeline import IngestionPipeline
from report import anomaly_view, device_snapshot_view, errors_ranking_view, print_json
from settings import load_settings, parse_log_level
from telemetry.errors import TelemetryError


logger = logging.getLogger(__name__)


# ---------------- CLI ----------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="telemetry-oracle",
        description="Aggregate a device telemetry log and flag anomalies",
    )
    # Collected as a list so a wrong count can print usage instead of exiting 2.
    parser.add_argument("log_files", nargs="*", metavar="log_file_path")
    parser.add_argument(
        "--no-anomalies",
        action="store_true",
        help="Only aggregate device state, skip anomaly rules",
    )
    parser.add_argument(
        "--by-errors",
        action="store_true",
        help="Also print devices ordered by ascending error count",
    )
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        default=None,
        help="Logging level (default: TELEMETRY_LOG_LEVEL or WARNING)",
    )
    return parser


# ---------------- Main ----------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if len(args.log_files) != 1:
        print(parser.format_usage().rstrip())
        return 0

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    level = args.log_level if args.log_level is not None else settings.log_level
    setup_logger(level=level, log_file=settings.log_file)

    rules = None
    if not args.no_anomalies:
        rules = default_rules(
            temperature_delta=settings.temperature_delta,
            battery_delta=settings.battery_delta,
            max_errors=settings.max_errors,
        )

    pipeline = IngestionPipeline(rules=rules)

    # ---- Ingest ----
    try:
        result = pipeline.run_file(args.log_files[0])
    except (OSError, TelemetryError) as e:
        logger.error("Ingestion aborted: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    # ---- Report ----
    print_json(device_snapshot_view(result.store))

    if pipeline.detecting:
        print_json(anomaly_view(result.anomalies))

    if args.by_errors:
        print_json(errors_ranking_view(result.store))

    return 0


if __name__ == "__main__":
    sys.exit(main())
