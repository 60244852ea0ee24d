"""
Status Aggregator

Groups a flat list of prediction records into a StatusBucket: one
ordered label sequence per equipment identifier. The bucket is rebuilt
from scratch on every successful poll and replaces the previous one.
"""

import re
from typing import Dict, Iterable, List

from .records import PredictionRecord


StatusBucket = Dict[str, List[int]]

_WHITESPACE = re.compile(r"\s+")


def normalize_equipment_id(raw: str) -> str:
    """
    Normalize an equipment identifier.

    Surrounding whitespace is dropped and each inner run of whitespace
    becomes a single underscore, so "Machine 2 Equipment 3" and
    "Machine_2_Equipment_3" land in the same bucket.
    """
    return _WHITESPACE.sub("_", raw.strip())


def build_status_bucket(records: Iterable[PredictionRecord]) -> StatusBucket:
    """
    Group prediction labels by equipment identifier.

    Args:
        records: Records in the order the service returned them

    Returns:
        Mapping of identifier to labels, insertion order preserved
        within each group and across groups
    """
    bucket: StatusBucket = {}
    for record in records:
        key = normalize_equipment_id(record.equipment)
        bucket.setdefault(key, []).append(int(record.prediction))
    return bucket


def latest_by_equipment(records: Iterable[PredictionRecord]) -> Dict[str, PredictionRecord]:
    """Most recent record per equipment identifier (by timestamp)."""
    latest: Dict[str, PredictionRecord] = {}
    for record in records:
        key = normalize_equipment_id(record.equipment)
        current = latest.get(key)
        if current is None or record.timestamp >= current.timestamp:
            latest[key] = record
    return latest
