"""
Prediction Data Endpoints

This module serves and ingests model predictions. The GET endpoint is
the one the dashboard polls.

Key Features:
- GET /data/: recent predictions in the {status, data} envelope
- POST /data/: batch ingestion with schema validation
- GET /data/status: server-side severity classification
- POST /data/demo/setup: seed synthetic predictions
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.database import get_db, DatabaseManager
from api.models import (
    DataEnvelope,
    DemoSetupResponse,
    EquipmentStatus,
    ErrorResponse,
    IngestResponse,
    PredictionBatch,
    SeverityTier,
    StatusCounts,
    StatusResponse,
    TierSource,
)
from core.aggregator import build_status_bucket, normalize_equipment_id
from core.classifier import StatusClassifier
from core.layout import equipment_ids
from core.records import PredictionRecord
from engine.generator import PredictionDataGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data", tags=["Prediction Data"])

classifier = StatusClassifier(known_ids=equipment_ids())


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> datetime:
    """Store everything as naive UTC so SQLite and Postgres agree."""
    if value is None:
        return utc_now()
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def window_start(hours: Optional[float]) -> Optional[datetime]:
    if hours is None:
        return None
    return utc_now() - timedelta(hours=hours)


def database_unavailable(error: SQLAlchemyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Prediction store unavailable: {error}"
    )


# =========================================
# API Endpoints
# =========================================

@router.get(
    "/",
    response_model=DataEnvelope,
    responses={503: {"model": ErrorResponse}},
    summary="Get recent predictions",
    description="""
    Get the most recent predictions, oldest first, wrapped in the
    envelope the dashboard polls: `{"status": "success", "data": [...]}`.
    """
)
async def get_predictions(
    limit: int = Query(default=1000, ge=1, le=10000, description="Maximum records"),
    hours: Optional[float] = Query(default=None, gt=0, le=8760, description="Only the last N hours"),
    equipment: Optional[str] = Query(default=None, description="Filter by equipment id"),
    db: Session = Depends(get_db)
):
    """Get recent predictions."""
    try:
        with DatabaseManager(db) as db_manager:
            rows = db_manager.get_recent_predictions(
                limit=limit,
                since=window_start(hours),
                equipment=normalize_equipment_id(equipment) if equipment else None,
            )
    except SQLAlchemyError as e:
        raise database_unavailable(e)
    return DataEnvelope(status="success", count=len(rows), data=rows)


@router.post(
    "/",
    response_model=IngestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={500: {"model": ErrorResponse}},
    summary="Ingest predictions",
    description="Store a batch of model predictions. The whole batch is validated before any row is written."
)
async def ingest_predictions(
    batch: PredictionBatch,
    db: Session = Depends(get_db)
):
    """Store a batch of predictions."""
    rows = []
    for item in batch.predictions:
        row = item.model_dump()
        row["equipment"] = normalize_equipment_id(item.equipment)
        row["timestamp"] = to_utc_naive(item.timestamp)
        rows.append(row)

    try:
        with DatabaseManager(db) as db_manager:
            inserted = db_manager.insert_predictions(rows)
    except SQLAlchemyError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to store predictions: {e}"
        )

    logger.info(f"Ingested {inserted} predictions")
    return IngestResponse(
        success=True,
        inserted=inserted,
        message=f"Stored {inserted} predictions"
    )


@router.get(
    "/status",
    response_model=StatusResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Get equipment status",
    description="""
    Classify every equipment id from its recent predictions.

    **Rule:** percentage of critical predictions (label 1)
    - Critical: more than 50%
    - Warning: more than 30%
    - Normal: otherwise

    Equipment without predictions in the window is reported as normal.
    """
)
async def get_equipment_status(
    hours: float = Query(default=1.0, gt=0, le=720, description="Window in hours"),
    db: Session = Depends(get_db)
):
    """Classify recent predictions per equipment."""
    try:
        with DatabaseManager(db) as db_manager:
            rows = db_manager.get_recent_predictions(limit=10000, since=window_start(hours))
    except SQLAlchemyError as e:
        raise database_unavailable(e)

    records = [PredictionRecord.model_validate(row) for row in rows]
    bucket = build_status_bucket(records)
    result = classifier.classify(bucket)
    counts = result.counts

    return StatusResponse(
        timestamp=datetime.now(timezone.utc),
        window_hours=hours,
        counts=StatusCounts(**counts),
        equipment=[
            EquipmentStatus(
                equipment=name,
                tier=SeverityTier(tier.value),
                source=TierSource(result.sources[name].value),
                critical_fraction=result.critical_fractions.get(name),
                sample_count=len(bucket.get(name, [])),
            )
            for name, tier in result.tiers.items()
        ]
    )


@router.post(
    "/demo/setup",
    response_model=DemoSetupResponse,
    summary="Seed demo predictions",
    description="Generate synthetic predictions for every equipment id and store them."
)
async def setup_demo_data(
    hours: float = Query(default=24, gt=0, le=720, description="Hours of history"),
    interval_minutes: int = Query(default=5, ge=1, le=60),
    reset: bool = Query(default=False, description="Delete existing predictions first"),
    seed: Optional[int] = Query(default=None, description="Random seed"),
    db: Session = Depends(get_db)
):
    """Seed synthetic predictions."""
    generator = PredictionDataGenerator(random_seed=seed)
    start = datetime.now(timezone.utc) - timedelta(hours=hours)

    rows = []
    for record in generator.generate_records(start, hours, interval_minutes):
        row = record.model_dump(exclude_none=True)
        row["prediction"] = int(record.prediction)
        row["timestamp"] = to_utc_naive(record.timestamp)
        rows.append(row)

    with DatabaseManager(db) as db_manager:
        if reset:
            deleted = db_manager.delete_all_predictions()
            logger.info(f"Deleted {deleted} predictions before seeding")
        inserted = db_manager.insert_predictions(rows)

    return DemoSetupResponse(
        success=True,
        inserted=inserted,
        hours=hours,
        message=f"Seeded {inserted} predictions over {hours} hours"
    )
