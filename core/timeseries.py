"""
Operating Environment Time Series

Turns fetched prediction records into per-machine sensor series for
the operating-environment charts.

Each machine chart has:
- an optional date range filter (startDate / endDate)
- a display option that keeps only a rolling window ending "now"
- a set of visible series (vibration, temperature, noise frequency)
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .layout import machine_names
from .records import PredictionRecord


SENSOR_SERIES = ["vibration", "temperature", "noise_frequency"]

SERIES_LABELS = {
    "vibration": "Average Vibration",
    "temperature": "Average Temperature",
    "noise_frequency": "Average Noise Frequency",
}

CHART_COLUMNS = ["timestamp", "equipment", "machine", "prediction"] + SENSOR_SERIES


class DisplayOption(str, Enum):
    """Rolling window applied to a machine chart."""
    MINUTE = "minute"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


DEFAULT_DISPLAY_OPTION = DisplayOption.HOURLY

DISPLAY_WINDOWS = {
    DisplayOption.MINUTE: timedelta(minutes=60),
    DisplayOption.HOURLY: timedelta(hours=24),
    DisplayOption.DAILY: timedelta(days=7),
    DisplayOption.WEEKLY: timedelta(weeks=4),
    DisplayOption.MONTHLY: timedelta(days=365),
}

# strftime equivalents of the chart tick labels
TICK_FORMATS = {
    DisplayOption.MINUTE: "%H:%M",
    DisplayOption.HOURLY: "%d/%m %H:%M",
    DisplayOption.DAILY: "%d/%m",
    DisplayOption.WEEKLY: "%d/%m",
    DisplayOption.MONTHLY: "%b %Y",
}


def parse_display_option(value: Any) -> DisplayOption:
    """Coerce a stored value to a DisplayOption, defaulting to hourly."""
    try:
        return DisplayOption(value)
    except ValueError:
        return DEFAULT_DISPLAY_OPTION


def default_filters() -> Dict[str, Dict[str, str]]:
    return {machine: {"startDate": "", "endDate": ""} for machine in machine_names()}


def default_display_options() -> Dict[str, str]:
    return {machine: DEFAULT_DISPLAY_OPTION.value for machine in machine_names()}


def default_display_modes() -> Dict[str, List[str]]:
    return {machine: list(SENSOR_SERIES) for machine in machine_names()}


def _to_utc(value: Any) -> Optional[pd.Timestamp]:
    """Parse a date bound; empty or unparseable values mean unbounded."""
    if value is None or value == "":
        return None
    try:
        stamp = pd.Timestamp(value)
    except (ValueError, TypeError):
        return None
    if stamp is pd.NaT:
        return None
    if stamp.tzinfo is None:
        return stamp.tz_localize("UTC")
    return stamp.tz_convert("UTC")


def records_to_frame(records: Iterable[PredictionRecord]) -> pd.DataFrame:
    """
    Build a chart DataFrame sorted by timestamp.

    Naive timestamps are taken as UTC so mixed inputs compare cleanly.
    """
    rows = [record.to_chart_row() for record in records]
    return rows_to_frame(rows)


def rows_to_frame(rows: List[Mapping[str, Any]]) -> pd.DataFrame:
    """Build a chart DataFrame from persisted chart rows."""
    if not rows:
        return pd.DataFrame(columns=CHART_COLUMNS)

    df = pd.DataFrame(list(rows))
    for column in CHART_COLUMNS:
        if column not in df.columns:
            df[column] = None
    missing = df["machine"].isna()
    if missing.any():
        df.loc[missing, "machine"] = (
            df.loc[missing, "equipment"].astype(str).str.extract(r"^(Machine_\d+)", expand=False)
        )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce", format="mixed")
    df = df.dropna(subset=["timestamp"])
    return df.sort_values("timestamp").reset_index(drop=True)


def filter_machine_frame(
    df: pd.DataFrame,
    machine: str,
    filters: Optional[Mapping[str, str]] = None,
    display_option: Any = DEFAULT_DISPLAY_OPTION,
    now: Optional[datetime] = None,
    global_start: Optional[str] = None,
    global_end: Optional[str] = None
) -> pd.DataFrame:
    """
    Select one machine's rows within its date range and display window.

    Args:
        df: Frame from records_to_frame / rows_to_frame
        machine: Machine name, e.g. "Machine_3"
        filters: {"startDate": ..., "endDate": ...}; "" means unbounded
        display_option: Rolling window name
        now: Reference time for the window (defaults to current UTC)
        global_start: Fallback start when the machine has none
        global_end: Fallback end when the machine has none

    Returns:
        Filtered frame, timestamp ascending
    """
    if df.empty:
        return df

    filters = filters or {}
    start = _to_utc(filters.get("startDate") or global_start)
    end = _to_utc(filters.get("endDate") or global_end)

    mask = df["machine"] == machine
    if start is not None:
        mask &= df["timestamp"] >= start
    if end is not None:
        mask &= df["timestamp"] <= end

    option = parse_display_option(display_option)
    reference = _to_utc(now) if now is not None else pd.Timestamp.now(tz=timezone.utc)
    mask &= df["timestamp"] >= reference - DISPLAY_WINDOWS[option]

    return df.loc[mask].reset_index(drop=True)


def format_tick(value: Any, display_option: Any) -> str:
    """Format a timestamp for the x axis; invalid dates render empty."""
    stamp = _to_utc(value)
    if stamp is None:
        return ""
    return stamp.strftime(TICK_FORMATS[parse_display_option(display_option)])


def visible_series(display_modes: Mapping[str, List[str]], machine: str) -> List[str]:
    """Series to draw for a machine, keeping the canonical order."""
    selected = display_modes.get(machine)
    if selected is None:
        return list(SENSOR_SERIES)
    return [series for series in SENSOR_SERIES if series in selected]
