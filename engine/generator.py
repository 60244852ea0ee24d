"""
Synthetic Prediction Generator

Generates realistic prediction records for every piece of equipment
on the factory floor, for seeding the prediction data service and for
running the dashboard without a network connection.

Features:
- Per-equipment conditions (healthy, degrading, failing)
- Condition progress grows over the generated window
- Sensor readings with natural variation plus condition drift
- Output as wire-format dicts or validated PredictionRecord objects
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional

from core.layout import equipment_ids
from core.records import PredictionRecord

from .conditions import ConditionLibrary, EquipmentCondition, condition_for


# Baseline sensor values for healthy equipment
BASE_VIBRATION = 2.0          # mm/s
BASE_TEMPERATURE = 45.0       # °C
BASE_NOISE_FREQUENCY = 120.0  # Hz


class PredictionDataGenerator:
    """
    Generator for synthetic prediction records.

    Example:
        gen = PredictionDataGenerator(random_seed=42)
        rows = gen.generate_to_list(
            start_time=datetime.now(timezone.utc) - timedelta(hours=6),
            duration_hours=6
        )
    """

    def __init__(
        self,
        equipment: Optional[List[str]] = None,
        conditions: Optional[Dict[str, EquipmentCondition]] = None,
        random_seed: Optional[int] = None
    ):
        """
        Args:
            equipment: Identifiers to generate for (defaults to the layout)
            conditions: Condition overrides per identifier
            random_seed: Seed for reproducible generation
        """
        self.equipment = equipment or equipment_ids()
        self.conditions = conditions
        self.rng = random.Random(random_seed)

    def generate_reading(
        self,
        equipment_id: str,
        timestamp: datetime,
        progress: float = 1.0
    ) -> Dict[str, Any]:
        """
        Generate one prediction record in wire format.

        Args:
            equipment_id: Equipment identifier
            timestamp: Reading time
            progress: Condition progress, 0.0 to 1.0
        """
        profile = ConditionLibrary.get(condition_for(equipment_id, self.conditions))
        label = self.rng.choices([0, 1, 2], weights=profile.label_weights(progress))[0]

        vibration = BASE_VIBRATION + profile.vibration_drift * progress + self.rng.gauss(0, 0.3)
        temperature = BASE_TEMPERATURE + profile.temperature_drift * progress + self.rng.gauss(0, 1.0)
        noise = BASE_NOISE_FREQUENCY + profile.noise_drift * progress + self.rng.gauss(0, 5.0)

        good_count = self.rng.randint(80, 120)
        if label == 1:
            good_count = int(good_count * 0.6)
        cycle_time = round(self.rng.uniform(28.0, 34.0), 1)
        performance = round(min(1.0, 30.0 / cycle_time), 3)
        quality = good_count / 120.0

        return {
            "equipment": equipment_id,
            "prediction": label,
            "timestamp": timestamp.isoformat(),
            "vibration": round(max(0.0, vibration), 3),
            "temperature": round(temperature, 2),
            "noise_frequency": round(max(0.0, noise), 2),
            "good_count": good_count,
            "cycle_time": cycle_time,
            "performance": performance,
            "oee": round(performance * quality * 0.95, 3),
        }

    def generate_batch(
        self,
        start_time: datetime,
        duration_hours: float,
        interval_minutes: int = 5
    ) -> Generator[Dict[str, Any], None, None]:
        """
        Yield readings for every equipment id at each interval.

        Condition progress goes linearly from 0 at start_time to 1 at
        the end of the window.
        """
        end_time = start_time + timedelta(hours=duration_hours)
        total_seconds = max(1.0, (end_time - start_time).total_seconds())
        current_time = start_time

        while current_time < end_time:
            progress = (current_time - start_time).total_seconds() / total_seconds
            for equipment_id in self.equipment:
                yield self.generate_reading(equipment_id, current_time, progress)
            current_time += timedelta(minutes=interval_minutes)

    def generate_to_list(
        self,
        start_time: datetime,
        duration_hours: float,
        interval_minutes: int = 5
    ) -> List[Dict[str, Any]]:
        return list(self.generate_batch(start_time, duration_hours, interval_minutes))

    def generate_records(
        self,
        start_time: datetime,
        duration_hours: float,
        interval_minutes: int = 5
    ) -> List[PredictionRecord]:
        """Generate readings as validated PredictionRecord objects."""
        return [
            PredictionRecord.model_validate(row)
            for row in self.generate_batch(start_time, duration_hours, interval_minutes)
        ]

    def envelope(
        self,
        duration_hours: float = 1.0,
        interval_minutes: int = 5,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Wrap the most recent window in the prediction service envelope."""
        now = now or datetime.now(timezone.utc)
        start = now - timedelta(hours=duration_hours)
        return {
            "status": "success",
            "data": self.generate_to_list(start, duration_hours, interval_minutes),
        }


class LocalPredictionSource:
    """
    Offline data source with the same contract as DataPoller.fetch.

    Every call produces a fresh window of synthetic records ending now.
    """

    def __init__(
        self,
        generator: Optional[PredictionDataGenerator] = None,
        window_hours: float = 1.0,
        interval_minutes: int = 5
    ):
        self.generator = generator or PredictionDataGenerator()
        self.window_hours = window_hours
        self.interval_minutes = interval_minutes

    def __call__(self) -> List[PredictionRecord]:
        now = datetime.now(timezone.utc)
        return self.generator.generate_records(
            now - timedelta(hours=self.window_hours),
            self.window_hours,
            self.interval_minutes,
        )


# =========================================
# Convenience Functions
# =========================================

def generate_prediction_data(
    hours: float = 24,
    start_time: Optional[datetime] = None,
    interval_minutes: int = 5,
    random_seed: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    Generate prediction rows for the whole factory.

    Args:
        hours: Length of the window
        start_time: Window start (defaults to 'hours' ago, UTC)
        interval_minutes: Minutes between readings
        random_seed: Seed for reproducible generation

    Returns:
        List of wire-format prediction dicts
    """
    generator = PredictionDataGenerator(random_seed=random_seed)
    start = start_time or (datetime.now(timezone.utc) - timedelta(hours=hours))
    return generator.generate_to_list(start, hours, interval_minutes)


def get_available_conditions() -> List[Dict[str, Any]]:
    """Information about every condition profile."""
    return [
        {
            "condition": profile.condition.value,
            "description": profile.description,
            "critical_probability": profile.critical_probability,
            "warning_probability": profile.warning_probability,
        }
        for profile in ConditionLibrary.all_profiles().values()
    ]
