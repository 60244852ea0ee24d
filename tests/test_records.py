"""
Tests for Prediction Records and Envelope Parsing

These tests verify that the prediction envelope is validated strictly
and that records expose the fields the dashboard needs.

Run with: pytest tests/test_records.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest
from core.errors import ParseFailure
from core.records import (
    PredictionLabel,
    PredictionRecord,
    parse_envelope,
    records_from_rows,
)


def make_row(equipment="Machine_1_Equipment_1", prediction=0, **extra):
    row = {
        "equipment": equipment,
        "prediction": prediction,
        "timestamp": "2024-05-01T08:00:00+00:00",
        "vibration": 2.1,
        "temperature": 45.3,
        "noise_frequency": 121.0,
    }
    row.update(extra)
    return row


class TestPredictionRecord:
    """Test single record validation."""

    def test_valid_record(self):
        """Test a complete record validates."""
        record = PredictionRecord.model_validate(make_row(prediction=1))

        assert record.prediction == PredictionLabel.CRITICAL
        assert record.vibration == 2.1
        assert record.timestamp.year == 2024

    def test_machine_derived_from_equipment(self):
        """Test machine name comes from the identifier prefix."""
        record = PredictionRecord.model_validate(make_row("Machine_3_Equipment_2"))
        assert record.machine_name == "Machine_3"

    def test_explicit_machine_wins(self):
        """Test an explicit machine field is used as is."""
        record = PredictionRecord.model_validate(make_row(machine="Line A"))
        assert record.machine_name == "Line A"

    def test_bool_label_rejected(self):
        """Test booleans are not accepted as labels."""
        with pytest.raises(ValueError):
            PredictionRecord.model_validate(make_row(prediction=True))

    def test_float_label_rejected(self):
        """Test float labels are rejected instead of coerced."""
        with pytest.raises(ValueError):
            PredictionRecord.model_validate(make_row(prediction=1.0))

    def test_unknown_label_rejected(self):
        """Test labels outside 0-2 are rejected."""
        with pytest.raises(ValueError):
            PredictionRecord.model_validate(make_row(prediction=3))

    def test_extra_fields_ignored(self):
        """Test unknown fields from the service are dropped."""
        record = PredictionRecord.model_validate(make_row(model_version="v7"))
        assert not hasattr(record, "model_version")

    def test_chart_row(self):
        """Test chart rows are JSON-ready."""
        row = PredictionRecord.model_validate(make_row(prediction=2)).to_chart_row()

        assert row["prediction"] == 2
        assert isinstance(row["prediction"], int)
        assert row["machine"] == "Machine_1"
        assert isinstance(row["timestamp"], str)
        assert "oee" not in row

    def test_naive_timestamp_is_utc(self):
        """Test a timestamp without an offset is read as UTC."""
        record = PredictionRecord.model_validate(make_row(timestamp="2024-05-01T08:00:00"))
        assert record.timestamp == datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

    def test_offset_timestamp_converted_to_utc(self):
        """Test a timestamp with an offset is converted to UTC."""
        record = PredictionRecord.model_validate(make_row(timestamp="2024-05-01T10:00:00+02:00"))

        assert record.timestamp.utcoffset() == timedelta(0)
        assert record.timestamp.hour == 8


class TestParseEnvelope:
    """Test envelope parsing."""

    def test_success_envelope(self):
        """Test records are returned in service order."""
        payload = {
            "status": "success",
            "data": [make_row("Machine_1_Equipment_2"), make_row("Machine_1_Equipment_1")],
        }
        records = parse_envelope(payload)

        assert [r.equipment for r in records] == [
            "Machine_1_Equipment_2",
            "Machine_1_Equipment_1",
        ]

    def test_empty_data(self):
        """Test an empty data list is valid."""
        assert parse_envelope({"status": "success", "data": []}) == []

    def test_non_success_status(self):
        """Test any status other than success fails."""
        with pytest.raises(ParseFailure):
            parse_envelope({"status": "error", "data": []})

    def test_non_object_payload(self):
        """Test a JSON array body fails."""
        with pytest.raises(ParseFailure) as exc_info:
            parse_envelope([make_row()], url="http://example/data/")

        assert exc_info.value.url == "http://example/data/"
        assert exc_info.value.kind == "parse"

    def test_one_bad_record_fails_envelope(self):
        """Test a single invalid record rejects the whole envelope."""
        bad = make_row()
        del bad["temperature"]
        payload = {"status": "success", "data": [make_row(), bad]}

        with pytest.raises(ParseFailure) as exc_info:
            parse_envelope(payload)

        assert "data.1.temperature" in exc_info.value.message

    def test_missing_data(self):
        """Test an envelope without data fails."""
        with pytest.raises(ParseFailure):
            parse_envelope({"status": "success"})


class TestRecordsFromRows:
    """Test rebuilding records from persisted chart rows."""

    def test_skips_unreadable_rows(self):
        """Test damaged rows are dropped, good rows kept."""
        rows = [make_row(), {"equipment": "Machine_1_Equipment_2"}, make_row(prediction=1)]
        records = records_from_rows(rows)

        assert len(records) == 2
        assert records[1].prediction == PredictionLabel.CRITICAL
