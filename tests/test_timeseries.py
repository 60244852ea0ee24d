"""
Tests for Operating Environment Series

Run with: pytest tests/test_timeseries.py -v
"""

from datetime import datetime, timezone

from core.timeseries import (
    DisplayOption,
    filter_machine_frame,
    format_tick,
    parse_display_option,
    rows_to_frame,
    visible_series,
)


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def row(equipment, timestamp, vibration=2.0):
    return {
        "equipment": equipment,
        "prediction": 0,
        "timestamp": timestamp,
        "vibration": vibration,
        "temperature": 45.0,
        "noise_frequency": 120.0,
    }


class TestRowsToFrame:
    """Test building the chart frame."""

    def test_sorted_with_machine(self):
        """Test rows are sorted by time and get a machine column."""
        df = rows_to_frame([
            row("Machine_2_Equipment_1", "2024-05-01T11:30:00+00:00"),
            row("Machine_1_Equipment_3", "2024-05-01T11:00:00Z"),
        ])

        assert list(df["machine"]) == ["Machine_1", "Machine_2"]
        assert df["timestamp"].is_monotonic_increasing

    def test_naive_timestamps_are_utc(self):
        """Test timestamps without an offset are read as UTC."""
        df = rows_to_frame([row("Machine_1_Equipment_1", "2024-05-01T11:00:00")])
        assert str(df["timestamp"].iloc[0]) == "2024-05-01 11:00:00+00:00"

    def test_unparseable_timestamps_dropped(self):
        """Test rows with invalid dates are removed."""
        df = rows_to_frame([
            row("Machine_1_Equipment_1", "not a date"),
            row("Machine_1_Equipment_1", "2024-05-01T11:00:00Z"),
        ])
        assert len(df) == 1

    def test_empty(self):
        """Test no rows gives an empty frame with chart columns."""
        df = rows_to_frame([])
        assert df.empty
        assert "vibration" in df.columns


class TestFilterMachineFrame:
    """Test per-machine filtering."""

    def setup_method(self):
        """Set up test fixtures."""
        self.df = rows_to_frame([
            row("Machine_1_Equipment_1", "2024-04-28T12:00:00Z"),  # 3 days ago
            row("Machine_1_Equipment_2", "2024-05-01T09:00:00Z"),  # 3 hours ago
            row("Machine_1_Equipment_1", "2024-05-01T11:30:00Z"),  # 30 minutes ago
            row("Machine_2_Equipment_1", "2024-05-01T11:45:00Z"),
        ])

    def test_machine_only(self):
        """Test other machines are excluded."""
        out = filter_machine_frame(self.df, "Machine_2", display_option="daily", now=NOW)
        assert list(out["equipment"]) == ["Machine_2_Equipment_1"]

    def test_display_windows(self):
        """Test each display option keeps its rolling window."""
        minute = filter_machine_frame(self.df, "Machine_1", display_option="minute", now=NOW)
        hourly = filter_machine_frame(self.df, "Machine_1", display_option="hourly", now=NOW)
        daily = filter_machine_frame(self.df, "Machine_1", display_option="daily", now=NOW)

        assert len(minute) == 1
        assert len(hourly) == 2
        assert len(daily) == 3

    def test_machine_date_range(self):
        """Test a machine's own start and end bounds."""
        out = filter_machine_frame(
            self.df,
            "Machine_1",
            filters={"startDate": "2024-05-01T10:00:00Z", "endDate": ""},
            display_option="monthly",
            now=NOW,
        )
        assert len(out) == 1

    def test_global_range_fallback(self):
        """Test the global range applies when the machine has none."""
        out = filter_machine_frame(
            self.df,
            "Machine_1",
            filters={"startDate": "", "endDate": ""},
            display_option="monthly",
            now=NOW,
            global_end="2024-04-30",
        )
        assert len(out) == 1

    def test_invalid_bounds_ignored(self):
        """Test unparseable bounds mean unbounded."""
        out = filter_machine_frame(
            self.df,
            "Machine_1",
            filters={"startDate": "soon", "endDate": "later"},
            display_option="weekly",
            now=NOW,
        )
        assert len(out) == 3


class TestDisplayHelpers:
    """Test display option and tick helpers."""

    def test_parse_display_option(self):
        """Test known values parse and unknown fall back to hourly."""
        assert parse_display_option("weekly") == DisplayOption.WEEKLY
        assert parse_display_option("yearly") == DisplayOption.HOURLY
        assert parse_display_option(None) == DisplayOption.HOURLY

    def test_format_tick(self):
        """Test tick labels follow the display option."""
        assert format_tick("2024-05-01T08:30:00Z", "minute") == "08:30"
        assert format_tick("2024-05-01T08:30:00Z", "hourly") == "01/05 08:30"
        assert format_tick("2024-05-01T08:30:00Z", "monthly") == "May 2024"

    def test_format_tick_invalid(self):
        """Test invalid dates render as an empty label."""
        assert format_tick("not a date", "hourly") == ""
        assert format_tick(None, "hourly") == ""

    def test_visible_series(self):
        """Test series selection keeps canonical order and defaults to all."""
        modes = {"Machine_1": ["noise_frequency", "vibration"]}
        assert visible_series(modes, "Machine_1") == ["vibration", "noise_frequency"]
        assert visible_series(modes, "Machine_2") == [
            "vibration", "temperature", "noise_frequency"
        ]
