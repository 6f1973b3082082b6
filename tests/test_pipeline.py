"""
Tests for the ingestion pipeline: aggregation, anomaly detection and
the fatal error policy.
"""

import builtins

import pytest

from detector import RuleSet, default_rules
from pipeline import IngestionPipeline, PipelineState
from telemetry import ingest
from telemetry.errors import FormatError, NumericParseError


class TestAggregation:
    """Tests for the plain aggregation mode."""

    def test_empty_input(self):
        result = IngestionPipeline().run([])

        assert len(result.store) == 0
        assert result.anomalies == {}
        assert result.stats.lines_read == 0

    def test_error_count_matches_error_records(self, line):
        lines = [
            line("D1", "error", "E1"),
            line("D2", "error", "E2"),
            line("D1", "temperature", "20"),
            line("D1", "error", "E3"),
        ]
        result = IngestionPipeline().run(lines)

        assert result.store.get("D1").error_count == 2
        assert result.store.get("D2").error_count == 1

    def test_latest_value_is_last_record(self, line):
        lines = [
            line("D1", "temperature", "20"),
            line("D1", "battery", "90"),
            line("D1", "temperature", "21"),
            line("D2", "temperature", "5"),
        ]
        result = IngestionPipeline().run(lines)

        assert result.store.get("D1").latest_values == {"temperature": "21", "battery": "90"}
        assert result.store.get("D2").latest_values == {"temperature": "5"}

    def test_no_rules_means_no_anomalies(self, line):
        lines = [line("D1", "temperature", "0"), line("D1", "temperature", "100")]
        pipeline = IngestionPipeline()
        result = pipeline.run(lines)

        assert not pipeline.detecting
        assert result.anomalies == {}

    def test_empty_rule_set_means_plain_aggregation(self, line):
        pipeline = IngestionPipeline(rules=RuleSet())
        result = pipeline.run([line("D1", "temperature", "not-a-number")])

        assert not pipeline.detecting
        assert result.store.get("D1").latest_values["temperature"] == "not-a-number"

    def test_blank_lines_are_skipped(self, line):
        lines = ["", line("D1", "motion", "detected"), "   "]
        result = IngestionPipeline().run(lines)

        assert result.stats.lines_read == 3
        assert result.stats.blank_lines == 2
        assert result.stats.records_parsed == 1

    def test_state_is_exhausted_after_run(self, line):
        pipeline = IngestionPipeline()
        assert pipeline.state is PipelineState.READING
        pipeline.run([line("D1", "motion", "idle")])
        assert pipeline.state is PipelineState.EXHAUSTED


class TestAnomalyDetection:
    """Tests for aggregation with rules."""

    def test_temperature_scenario(self, line):
        lines = [
            line("D1", "temperature", "20", ts="2024-01-01 10:00:00"),
            line("D1", "temperature", "27", ts="2024-01-01 10:01:00"),
        ]
        result = IngestionPipeline(rules=default_rules()).run(lines)

        assert result.store.get("D1").latest_values["temperature"] == "27"
        assert result.anomalies == {"D1": ["Temperature fluctuation over 5 degrees"]}

    def test_five_errors_scenario(self, line):
        lines = [line("D2", "error", f"E{i}") for i in range(5)]
        result = IngestionPipeline(rules=default_rules()).run(lines)

        assert result.store.get("D2").error_count == 5
        assert result.anomalies == {"D2": ["More than 3 errors reported"]}

    def test_four_errors_do_not_trigger(self, line):
        lines = [line("D2", "error", "E") for _ in range(4)]
        result = IngestionPipeline(rules=default_rules()).run(lines)
        assert result.anomalies == {}

    def test_descriptions_never_repeat(self, line):
        lines = [line("D1", "temperature", str(v)) for v in (0, 10, 0, 10, 0)]
        lines += [line("D1", "error", "E") for _ in range(8)]
        result = IngestionPipeline(rules=default_rules()).run(lines)

        assert result.anomalies["D1"] == [
            "Temperature fluctuation over 5 degrees",
            "More than 3 errors reported",
        ]
        assert result.stats.anomalies_found == 2

    def test_rules_see_state_before_the_record(self, line):
        # The first battery reading must not be compared with itself.
        lines = [line("D1", "battery", "100"), line("D1", "battery", "90")]
        result = IngestionPipeline(rules=default_rules()).run(lines)
        assert result.anomalies == {}

    def test_findings_are_per_device(self, line):
        lines = [
            line("D1", "battery", "100"),
            line("D2", "battery", "50"),
            line("D1", "battery", "70"),
        ]
        result = IngestionPipeline(rules=default_rules()).run(lines)

        assert result.anomalies == {"D1": ["Battery level drop over 20%"]}
        assert [(f.device_id, f.description) for f in result.findings()] == [
            ("D1", "Battery level drop over 20%"),
        ]


class TestFatalErrors:
    """A bad line aborts the whole run."""

    def test_format_error_carries_line_number(self, line):
        pipeline = IngestionPipeline()
        with pytest.raises(FormatError) as exc:
            pipeline.run([line("D1", "motion", "idle"), "broken line"])

        assert exc.value.line_number == 2
        assert pipeline.result is None

    def test_numeric_error_aborts_detection(self, line):
        lines = [line("D1", "temperature", "20"), line("D1", "temperature", "warm")]
        pipeline = IngestionPipeline(rules=default_rules())
        with pytest.raises(NumericParseError):
            pipeline.run(lines)
        assert pipeline.result is None

    def test_no_skip_after_error(self, line):
        seen = []

        def lines():
            for l in ["bad", line("D1", "motion", "idle")]:
                seen.append(l)
                yield l

        with pytest.raises(FormatError):
            IngestionPipeline().run(lines())
        assert seen == ["bad"]


class TestRunFile:
    """Tests for reading straight from a log file."""

    def test_run_file(self, write_log, line):
        path = write_log([line("D1", "temperature", "20"), line("D1", "temperature", "30")])
        result = IngestionPipeline(rules=default_rules()).run_file(path)

        assert result.anomalies == {"D1": ["Temperature fluctuation over 5 degrees"]}

    def test_missing_file_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            IngestionPipeline().run_file(tmp_path / "missing.log")

    @pytest.fixture
    def opened(self, monkeypatch):
        """Record every file object the line source opens."""
        handles = []

        def recording_open(*args, **kwargs):
            f = builtins.open(*args, **kwargs)
            handles.append(f)
            return f

        monkeypatch.setattr(ingest, "open", recording_open, raising=False)
        return handles

    def test_file_closed_after_success(self, write_log, line, opened):
        IngestionPipeline().run_file(write_log([line("D1", "motion", "idle")]))

        assert len(opened) == 1
        assert opened[0].closed

    def test_file_closed_after_format_error(self, write_log, line, opened):
        path = write_log([line("D1", "motion", "idle"), "broken line", line("D1", "motion", "idle")])

        with pytest.raises(FormatError):
            IngestionPipeline().run_file(path)

        assert len(opened) == 1
        assert opened[0].closed

    def test_file_closed_after_numeric_error(self, write_log, line, opened):
        path = write_log([line("D1", "battery", "90"), line("D1", "battery", "low")])

        with pytest.raises(NumericParseError):
            IngestionPipeline(rules=default_rules()).run_file(path)

        assert opened[0].closed
