"""
Prediction Records and Envelope Schema

The prediction service answers every poll with a JSON envelope:

    {"status": "success", "data": [{equipment, prediction, timestamp,
                                     vibration, temperature,
                                     noise_frequency}, ...]}

This module validates that envelope with pydantic and fails closed:
any shape mismatch raises ParseFailure instead of letting a partial
record list through to the aggregator.
"""

import logging
import re
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ParseFailure

logger = logging.getLogger(__name__)

MACHINE_PREFIX = re.compile(r"^(Machine_\d+)")


class PredictionLabel(IntEnum):
    """Integer labels emitted by the predictive model."""
    NORMAL = 0
    CRITICAL = 1
    WARNING = 2


class PredictionRecord(BaseModel):
    """
    A single model prediction for one piece of equipment.

    Records are immutable once received. Optional production fields
    (good count, cycle time, performance, OEE) are carried through for
    the machine cards when the service provides them.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    equipment: str = Field(..., min_length=1)
    prediction: PredictionLabel
    timestamp: datetime
    vibration: float
    temperature: float
    noise_frequency: float

    machine: Optional[str] = None
    good_count: Optional[int] = None
    cycle_time: Optional[float] = None
    performance: Optional[float] = None
    oee: Optional[float] = None

    @field_validator("prediction", mode="before")
    @classmethod
    def reject_non_integer_labels(cls, value: Any) -> Any:
        # bools and floats like 1.0 would otherwise coerce silently
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"prediction must be an integer label, got {value!r}")
        return value

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # offset-less timestamps are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def machine_name(self) -> str:
        """Machine this record belongs to (explicit or derived from the id)."""
        if self.machine:
            return self.machine
        match = MACHINE_PREFIX.match(self.equipment.strip())
        return match.group(1) if match else self.equipment.strip()

    def to_chart_row(self) -> dict:
        """Flatten for chart storage with an ISO-8601 timestamp."""
        row = self.model_dump(mode="json", exclude_none=True)
        row["prediction"] = int(self.prediction)
        row["machine"] = self.machine_name
        return row


class PredictionEnvelope(BaseModel):
    """Top-level response body of the prediction service."""
    model_config = ConfigDict(extra="ignore")

    status: str
    data: List[PredictionRecord]

    @field_validator("status")
    @classmethod
    def require_success(cls, value: str) -> str:
        if value != "success":
            raise ValueError(f"envelope status is {value!r}, expected 'success'")
        return value


def parse_envelope(payload: Any, url: Optional[str] = None) -> List[PredictionRecord]:
    """
    Validate a decoded JSON payload and return its records.

    Args:
        payload: Decoded JSON body
        url: Source URL, attached to the error for logging

    Returns:
        List of PredictionRecord in service order

    Raises:
        ParseFailure: If the payload does not match the envelope schema
    """
    if not isinstance(payload, dict):
        raise ParseFailure(
            f"Expected a JSON object, got {type(payload).__name__}", url=url
        )

    try:
        envelope = PredictionEnvelope.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ParseFailure(
            f"Invalid prediction envelope at '{location}': {first.get('msg')} "
            f"({e.error_count()} error(s))",
            url=url,
        ) from e

    return list(envelope.data)


def records_from_rows(rows: List[dict]) -> List[PredictionRecord]:
    """Rebuild records from persisted chart rows, skipping unreadable ones."""
    records = []
    for row in rows:
        try:
            records.append(PredictionRecord.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Dropping unreadable chart row: {e.error_count()} error(s)")
    return records
