"""
Core Module - Factory Digital Twin

This module contains the core logic for the factory monitoring dashboard:
- Prediction record schema and envelope validation
- Status aggregation and severity classification
- Local key-value persistence of the last-known snapshot
- Polling, timers, and the dashboard controller
- Operating-environment time series filtering

These components are framework-agnostic and are used by both the
Streamlit dashboard and the prediction data API.
"""

from .errors import DashboardError, NetworkFailure, ParseFailure
from .records import PredictionLabel, PredictionRecord, parse_envelope
from .aggregator import StatusBucket, build_status_bucket, normalize_equipment_id
from .classifier import (
    ClassificationResult,
    SeverityTier,
    StatusClassifier,
    TierSource,
    merge_snapshot,
)
from .store import KeyValueStore, MemoryStore, StoreKeys
from .state import DashboardState
from .poller import DataPoller
from .scheduler import BlinkEffect, PeriodicSchedule
from .controller import DashboardController
from .config import DashboardSettings

__all__ = [
    # Errors
    "DashboardError",
    "NetworkFailure",
    "ParseFailure",

    # Records
    "PredictionLabel",
    "PredictionRecord",
    "parse_envelope",

    # Aggregation and classification
    "StatusBucket",
    "build_status_bucket",
    "normalize_equipment_id",
    "ClassificationResult",
    "SeverityTier",
    "StatusClassifier",
    "TierSource",
    "merge_snapshot",

    # Persistence and state
    "KeyValueStore",
    "MemoryStore",
    "StoreKeys",
    "DashboardState",

    # Runtime
    "DataPoller",
    "BlinkEffect",
    "PeriodicSchedule",
    "DashboardController",
    "DashboardSettings",
]

__version__ = "0.1.0"
