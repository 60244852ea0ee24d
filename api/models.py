"""
Pydantic Models for API Request/Response Validation

This module defines the data models used by the prediction data API for:
- Request body validation
- Response serialization
- Documentation generation (OpenAPI/Swagger)

All models use Pydantic v2 syntax for validation and serialization.
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


# =========================================
# Enums
# =========================================

class SeverityTier(str, Enum):
    """Equipment severity tiers."""
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class TierSource(str, Enum):
    """Rule that produced a tier."""
    CURRENT = "current"
    SNAPSHOT = "snapshot"


# =========================================
# Prediction Models
# =========================================

class PredictionInput(BaseModel):
    """
    A single model prediction submitted for storage.

    The prediction label follows the model's convention:
    0 = normal, 1 = critical, 2 = warning.
    """
    equipment: str = Field(
        ...,
        description="Equipment identifier, e.g. Machine_2_Equipment_3",
        min_length=1,
        max_length=100
    )
    prediction: int = Field(
        ...,
        description="Prediction label (0=normal, 1=critical, 2=warning)",
        ge=0, le=2
    )
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Time of the reading (ISO 8601); defaults to now"
    )
    vibration: float = Field(..., description="Vibration (mm/s)", ge=0)
    temperature: float = Field(..., description="Temperature (°C)", ge=-50, le=300)
    noise_frequency: float = Field(..., description="Noise frequency (Hz)", ge=0)

    machine: Optional[str] = Field(default=None, description="Machine name", max_length=50)
    good_count: Optional[int] = Field(default=None, description="Good parts count", ge=0)
    cycle_time: Optional[float] = Field(default=None, description="Cycle time (s)", ge=0)
    performance: Optional[float] = Field(default=None, description="Performance ratio", ge=0)
    oee: Optional[float] = Field(default=None, description="Overall equipment effectiveness", ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "equipment": "Machine_2_Equipment_3",
                "prediction": 2,
                "timestamp": "2024-05-01T08:30:00Z",
                "vibration": 3.4,
                "temperature": 51.2,
                "noise_frequency": 146.0
            }
        }
    )


class PredictionBatch(BaseModel):
    """Batch of predictions for bulk ingestion."""
    predictions: List[PredictionInput] = Field(
        ...,
        description="List of predictions",
        min_length=1,
        max_length=10000
    )


class DataEnvelope(BaseModel):
    """Response envelope polled by the dashboard."""
    status: str = Field(default="success", description="Always 'success' on 200")
    count: int = Field(..., description="Number of records in data")
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Prediction records")


class IngestResponse(BaseModel):
    """Response from prediction ingestion."""
    success: bool
    inserted: int
    message: str


class DemoSetupResponse(BaseModel):
    """Response from seeding synthetic demo data."""
    success: bool
    inserted: int
    hours: float
    message: str


# =========================================
# Status Models
# =========================================

class StatusCounts(BaseModel):
    normal: int = 0
    warning: int = 0
    critical: int = 0


class EquipmentStatus(BaseModel):
    """Classified status of one equipment identifier."""
    equipment: str
    tier: SeverityTier
    source: TierSource
    critical_fraction: Optional[float] = Field(
        None,
        description="Percentage of critical predictions (current rule only)"
    )
    sample_count: int = Field(0, description="Predictions considered")


class StatusResponse(BaseModel):
    """Server-side classification of recent predictions."""
    timestamp: datetime
    window_hours: float
    counts: StatusCounts
    equipment: List[EquipmentStatus]


# =========================================
# System Status Models
# =========================================

class SystemHealth(BaseModel):
    """System health check response."""
    status: str = Field(..., description="ok, degraded, or error")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Current server time")
    database: str = Field(..., description="Database connection status")
    components: Dict[str, str] = Field(
        default_factory=dict,
        description="Status of system components"
    )


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: bool = True
    message: str
    detail: Optional[str] = None
    status_code: Optional[int] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
