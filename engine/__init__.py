"""
Engine Module - Synthetic Prediction Generation

This module provides synthetic prediction data for seeding the
prediction data service and for running the dashboard offline.

Key Components:
- PredictionDataGenerator: Generates prediction records per equipment
- LocalPredictionSource: Offline stand-in for the HTTP poller
- EquipmentCondition / ConditionLibrary: Condition profiles

Usage:
    from engine import PredictionDataGenerator

    generator = PredictionDataGenerator(random_seed=7)
    rows = generator.generate_to_list(
        start_time=datetime.now(timezone.utc) - timedelta(hours=6),
        duration_hours=6
    )
"""

from .conditions import (
    ConditionLibrary,
    ConditionProfile,
    EquipmentCondition,
)
from .generator import (
    LocalPredictionSource,
    PredictionDataGenerator,
    generate_prediction_data,
    get_available_conditions,
)

__all__ = [
    # Conditions
    "ConditionLibrary",
    "ConditionProfile",
    "EquipmentCondition",

    # Data Generator
    "LocalPredictionSource",
    "PredictionDataGenerator",
    "generate_prediction_data",
    "get_available_conditions",
]

__version__ = "0.1.0"
