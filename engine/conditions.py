"""
Equipment Condition Profiles for Synthetic Predictions

Each condition describes how the predictive model tends to label a
piece of equipment and how its sensors drift while in that condition.

- Healthy: almost always predicted normal, steady sensors
- Degrading: a rising share of warnings, vibration creeping up
- Failing: mostly critical predictions, hot and noisy
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class EquipmentCondition(Enum):
    """Underlying condition driving the synthetic predictions."""
    HEALTHY = "healthy"
    DEGRADING = "degrading"
    FAILING = "failing"


@dataclass
class ConditionProfile:
    """
    Label probabilities and sensor behaviour for one condition.

    Attributes:
        condition: Condition this profile describes
        description: Human-readable summary
        critical_probability: Chance a prediction is labelled 1 (critical)
        warning_probability: Chance a prediction is labelled 2 (warning)
        vibration_drift: Added vibration (mm/s) at full progress
        temperature_drift: Added temperature (°C) at full progress
        noise_drift: Added noise frequency (Hz) at full progress
    """
    condition: EquipmentCondition
    description: str
    critical_probability: float
    warning_probability: float
    vibration_drift: float = 0.0
    temperature_drift: float = 0.0
    noise_drift: float = 0.0

    def label_weights(self, progress: float = 1.0) -> List[float]:
        """
        Weights for labels [normal, critical, warning] at a given progress.

        Args:
            progress: 0.0 (condition just started) to 1.0 (fully developed)
        """
        progress = min(1.0, max(0.0, progress))
        critical = self.critical_probability * progress
        warning = self.warning_probability * progress
        normal = max(0.0, 1.0 - critical - warning)
        return [normal, critical, warning]


class ConditionLibrary:
    """Pre-built condition profiles."""

    @staticmethod
    def healthy() -> ConditionProfile:
        return ConditionProfile(
            condition=EquipmentCondition.HEALTHY,
            description="Normal operation with occasional false alarms",
            critical_probability=0.05,
            warning_probability=0.05,
        )

    @staticmethod
    def degrading() -> ConditionProfile:
        return ConditionProfile(
            condition=EquipmentCondition.DEGRADING,
            description="Bearing wear developing; warnings climb, criticals appear",
            critical_probability=0.40,
            warning_probability=0.30,
            vibration_drift=3.0,
            temperature_drift=6.0,
            noise_drift=40.0,
        )

    @staticmethod
    def failing() -> ConditionProfile:
        return ConditionProfile(
            condition=EquipmentCondition.FAILING,
            description="Imminent failure; the model flags most readings critical",
            critical_probability=0.80,
            warning_probability=0.15,
            vibration_drift=7.5,
            temperature_drift=15.0,
            noise_drift=120.0,
        )

    @classmethod
    def get(cls, condition: EquipmentCondition) -> ConditionProfile:
        return cls.all_profiles()[condition]

    @classmethod
    def all_profiles(cls) -> Dict[EquipmentCondition, ConditionProfile]:
        return {
            EquipmentCondition.HEALTHY: cls.healthy(),
            EquipmentCondition.DEGRADING: cls.degrading(),
            EquipmentCondition.FAILING: cls.failing(),
        }


# Default plant: mostly healthy, one machine in trouble
DEFAULT_CONDITIONS: Dict[str, EquipmentCondition] = {
    "Machine_2_Equipment_3": EquipmentCondition.DEGRADING,
    "Machine_4_Equipment_1": EquipmentCondition.FAILING,
    "Machine_4_Equipment_2": EquipmentCondition.DEGRADING,
}


def condition_for(
    equipment_id: str,
    overrides: Optional[Dict[str, EquipmentCondition]] = None
) -> EquipmentCondition:
    """Condition of an equipment id, healthy unless overridden."""
    conditions = DEFAULT_CONDITIONS if overrides is None else overrides
    return conditions.get(equipment_id, EquipmentCondition.HEALTHY)
