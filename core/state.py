"""
Dashboard Application State

A single DashboardState object owns everything the dashboard shows:
the current status bucket, the last-known snapshot, the latest
classification, the chart records, and the chart preferences.

Lifecycle:
- load(store): on mount, restore every persisted key. The restored
  snapshot is classified immediately so the first render is never empty.
- apply_records(records): the only writer of bucket and snapshot.
  Rebuilds the bucket, classifies, merges and persists the snapshot.
- record_failure(error): keeps the previous state, remembers the error.
- save(store): on unmount, persist preferences and the snapshot.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .aggregator import StatusBucket, build_status_bucket
from .classifier import ClassificationResult, StatusClassifier, merge_snapshot
from .errors import DashboardError
from .records import PredictionRecord
from .store import KeyValueStore, StoreKeys
from .timeseries import (
    DEFAULT_DISPLAY_OPTION,
    SENSOR_SERIES,
    default_display_modes,
    default_display_options,
    default_filters,
    parse_display_option,
)

logger = logging.getLogger(__name__)


def _as_bucket(value: Any) -> StatusBucket:
    """Keep only well-formed {id: [int, ...]} entries from a stored blob."""
    if not isinstance(value, dict):
        return {}
    bucket: StatusBucket = {}
    for name, labels in value.items():
        if isinstance(labels, list) and all(
            isinstance(label, int) and not isinstance(label, bool) for label in labels
        ):
            bucket[str(name)] = list(labels)
    return bucket


def _persist(store: KeyValueStore, key: str, value: Any) -> bool:
    """Write one key; a failed write is logged and the in-memory state kept."""
    try:
        store.set(key, value)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning(f"Could not persist '{key}': {e}")
        return False


@dataclass
class DashboardState:
    """
    Explicit application state for one dashboard view.

    Attributes:
        bucket: Labels from the latest successful poll (empty until one lands)
        snapshot: Last-known labels for every identifier ever seen
        result: Latest classification
        chart_rows: Latest fetched records as chart rows
        filters: Per-machine {"startDate", "endDate"}
        display_options: Per-machine rolling window name
        display_modes: Per-machine visible series
        start_date / end_date: Global fallback date range
        restored: True while showing persisted data only
        last_success_at / last_error_at: Epoch seconds of the last outcomes
        last_error: Most recent poll error, cleared on success
    """
    classifier: StatusClassifier = field(default_factory=StatusClassifier)
    bucket: StatusBucket = field(default_factory=dict)
    snapshot: StatusBucket = field(default_factory=dict)
    result: ClassificationResult = field(default_factory=ClassificationResult)
    chart_rows: List[Dict[str, Any]] = field(default_factory=list)
    filters: Dict[str, Dict[str, str]] = field(default_factory=default_filters)
    display_options: Dict[str, str] = field(default_factory=default_display_options)
    display_modes: Dict[str, List[str]] = field(default_factory=default_display_modes)
    start_date: str = ""
    end_date: str = ""
    restored: bool = False
    last_success_at: Optional[float] = None
    last_error_at: Optional[float] = None
    last_error: Optional[DashboardError] = None

    # =========================================
    # Lifecycle
    # =========================================

    def load(self, store: KeyValueStore) -> None:
        """Restore persisted state and classify the restored snapshot."""
        self.snapshot = _as_bucket(store.get(StoreKeys.STATUS_LIGHTS))

        chart_rows = store.get(StoreKeys.CHART_DATA)
        if isinstance(chart_rows, list):
            self.chart_rows = [row for row in chart_rows if isinstance(row, dict)]

        filters = store.get(StoreKeys.FILTERS)
        if isinstance(filters, dict):
            merged = default_filters()
            for machine, bounds in filters.items():
                if isinstance(bounds, dict):
                    merged[machine] = {
                        "startDate": str(bounds.get("startDate") or ""),
                        "endDate": str(bounds.get("endDate") or ""),
                    }
            self.filters = merged

        options = store.get(StoreKeys.DISPLAY_OPTIONS)
        if isinstance(options, dict):
            merged_options = default_display_options()
            for machine, option in options.items():
                merged_options[machine] = parse_display_option(option).value
            self.display_options = merged_options

        modes = store.get(StoreKeys.DISPLAY_MODES)
        if isinstance(modes, dict):
            merged_modes = default_display_modes()
            for machine, series in modes.items():
                if isinstance(series, list):
                    merged_modes[machine] = [s for s in SENSOR_SERIES if s in series]
            self.display_modes = merged_modes

        self.start_date = str(store.get(StoreKeys.START_DATE) or "")
        self.end_date = str(store.get(StoreKeys.END_DATE) or "")

        # No poll has landed yet, so every tier comes from the snapshot rule
        self.bucket = {}
        self.restored = bool(self.snapshot)
        if self.restored:
            logger.info(f"Restored status snapshot for {len(self.snapshot)} equipment")
        self.result = self.classifier.classify(self.bucket, self.snapshot)

    def save(self, store: KeyValueStore) -> None:
        """Persist every key owned by the state."""
        _persist(store, StoreKeys.STATUS_LIGHTS, self.snapshot)
        _persist(store, StoreKeys.CHART_DATA, self.chart_rows)
        self.save_preferences(store)

    def save_preferences(self, store: KeyValueStore) -> None:
        _persist(store, StoreKeys.FILTERS, self.filters)
        _persist(store, StoreKeys.DISPLAY_OPTIONS, self.display_options)
        _persist(store, StoreKeys.DISPLAY_MODES, self.display_modes)
        _persist(store, StoreKeys.START_DATE, self.start_date)
        _persist(store, StoreKeys.END_DATE, self.end_date)

    # =========================================
    # Poll outcomes
    # =========================================

    def apply_records(
        self,
        records: Iterable[PredictionRecord],
        now: float,
        store: Optional[KeyValueStore] = None
    ) -> ClassificationResult:
        """
        Run the poll-then-classify sequence for a successful fetch.

        The bucket is replaced, never merged. The snapshot becomes the
        union of the previous snapshot and the new bucket.
        """
        records = list(records)
        previous_snapshot = self.snapshot

        self.bucket = build_status_bucket(records)
        self.result = self.classifier.classify(self.bucket, previous_snapshot)
        self.snapshot = merge_snapshot(previous_snapshot, self.bucket)
        self.chart_rows = [record.to_chart_row() for record in records]

        self.restored = False
        self.last_success_at = now
        self.last_error = None

        if store is not None:
            _persist(store, StoreKeys.STATUS_LIGHTS, self.snapshot)
            _persist(store, StoreKeys.CHART_DATA, self.chart_rows)

        counts = self.result.counts
        logger.info(
            f"Classified {len(self.bucket)} equipment from {len(records)} records: "
            f"{counts['normal']} normal, {counts['warning']} warning, "
            f"{counts['critical']} critical"
        )
        return self.result

    def record_failure(self, error: DashboardError, now: float) -> None:
        """Keep the previous state and remember why the poll failed."""
        self.last_error = error
        self.last_error_at = now
        logger.error(f"Poll failed ({error.kind}): {error.message}")

    def is_stale(self, now: float, poll_interval_seconds: float) -> bool:
        """
        True when the displayed statuses may not reflect the plant.

        That is: nothing fetched since mount, the latest attempt failed,
        or the last success is older than two poll intervals.
        """
        if self.last_success_at is None:
            return True
        if self.last_error is not None:
            return True
        return now - self.last_success_at > 2 * poll_interval_seconds

    # =========================================
    # Chart preferences
    # =========================================

    def set_filter(
        self,
        machine: str,
        bound: str,
        value: str,
        store: Optional[KeyValueStore] = None
    ) -> None:
        """Update one date bound ("startDate" or "endDate") of a machine."""
        if bound not in ("startDate", "endDate"):
            raise ValueError(f"Unknown filter bound: {bound}")
        bounds = dict(self.filters.get(machine, {"startDate": "", "endDate": ""}))
        bounds[bound] = value or ""
        self.filters = {**self.filters, machine: bounds}
        if store is not None:
            _persist(store, StoreKeys.FILTERS, self.filters)

    def set_display_option(
        self,
        machine: str,
        option: str,
        store: Optional[KeyValueStore] = None
    ) -> None:
        self.display_options = {
            **self.display_options,
            machine: parse_display_option(option).value,
        }
        if store is not None:
            _persist(store, StoreKeys.DISPLAY_OPTIONS, self.display_options)

    def set_display_mode(
        self,
        machine: str,
        series: Iterable[str],
        store: Optional[KeyValueStore] = None
    ) -> None:
        selected = set(series)
        self.display_modes = {
            **self.display_modes,
            machine: [s for s in SENSOR_SERIES if s in selected],
        }
        if store is not None:
            _persist(store, StoreKeys.DISPLAY_MODES, self.display_modes)

    def set_date_range(
        self,
        start_date: str,
        end_date: str,
        store: Optional[KeyValueStore] = None
    ) -> None:
        """Update the global fallback date range."""
        self.start_date = start_date or ""
        self.end_date = end_date or ""
        if store is not None:
            _persist(store, StoreKeys.START_DATE, self.start_date)
            _persist(store, StoreKeys.END_DATE, self.end_date)

    def display_option_for(self, machine: str) -> str:
        return self.display_options.get(machine, DEFAULT_DISPLAY_OPTION.value)
