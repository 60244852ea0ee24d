"""
Status Classifier

Maps each equipment identifier to a three-level severity tier.

Two rules are in play:
- Current rule: identifiers present in this poll's bucket are classified
  by the percentage of critical predictions (label 1).
      > 50%  -> Critical
      > 30%  -> Warning
      else   -> Normal
- Snapshot rule: identifiers missing from this poll fall back to the
  persisted snapshot and are classified by its FIRST label only.
      1 -> Critical, 2 -> Warning, anything else -> Normal

The two rules disagree for the same label sequence (a snapshot of
[1, 0, 0, 0] is Critical while the same current sequence is Normal).
That is how the monitored plant's dashboards have always behaved, so the
rules are kept separate and every result records which one produced it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from .aggregator import StatusBucket
from .records import PredictionLabel


CRITICAL_THRESHOLD = 50.0   # % critical above which equipment is Critical
WARNING_THRESHOLD = 30.0    # % critical above which equipment is Warning


class SeverityTier(Enum):
    """User-facing equipment status."""
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def alerting(self) -> bool:
        """Warning and Critical markers blink."""
        return self is not SeverityTier.NORMAL


class TierSource(Enum):
    """Which rule produced a tier."""
    CURRENT = "current"
    SNAPSHOT = "snapshot"


@dataclass
class ClassificationResult:
    """
    Outcome of one classification pass.

    Attributes:
        tiers: Severity tier per equipment identifier
        sources: Rule that produced each tier
        critical_fractions: Critical percentage for current-rule identifiers
    """
    tiers: Dict[str, SeverityTier] = field(default_factory=dict)
    sources: Dict[str, TierSource] = field(default_factory=dict)
    critical_fractions: Dict[str, float] = field(default_factory=dict)

    @property
    def counts(self) -> Dict[str, int]:
        """Aggregate counts for the status legend."""
        counts = {tier.value: 0 for tier in SeverityTier}
        for tier in self.tiers.values():
            counts[tier.value] += 1
        return counts

    def alerting(self) -> List[str]:
        """Identifiers currently in Warning or Critical."""
        return [name for name, tier in self.tiers.items() if tier.alerting]

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "tiers": {name: tier.value for name, tier in self.tiers.items()},
            "sources": {name: src.value for name, src in self.sources.items()},
            "critical_fractions": {
                name: round(value, 1)
                for name, value in self.critical_fractions.items()
            },
            "counts": self.counts,
        }


def critical_fraction(labels: Sequence[int]) -> float:
    """Percentage of labels that are critical (0-100)."""
    if not labels:
        return 0.0
    critical = sum(1 for label in labels if label == PredictionLabel.CRITICAL)
    return critical * 100.0 / len(labels)


def classify_fraction(fraction: float) -> SeverityTier:
    """Apply the percentage thresholds to a critical fraction."""
    if fraction > CRITICAL_THRESHOLD:
        return SeverityTier.CRITICAL
    elif fraction > WARNING_THRESHOLD:
        return SeverityTier.WARNING
    else:
        return SeverityTier.NORMAL


def classify_first_label(labels: Optional[Sequence[int]]) -> SeverityTier:
    """Snapshot rule: only the first stored label matters."""
    first = labels[0] if labels else None
    if first == PredictionLabel.CRITICAL:
        return SeverityTier.CRITICAL
    elif first == PredictionLabel.WARNING:
        return SeverityTier.WARNING
    return SeverityTier.NORMAL


class StatusClassifier:
    """
    Classify every known equipment identifier.

    Example:
        classifier = StatusClassifier(known_ids=equipment_ids())
        result = classifier.classify(bucket, snapshot)
        print(result.counts)  # {"normal": 12, "warning": 2, "critical": 1}
    """

    def __init__(self, known_ids: Optional[Iterable[str]] = None):
        """
        Args:
            known_ids: Identifiers the render layer always shows, even
                       when neither the bucket nor the snapshot has them
        """
        self.known_ids: List[str] = list(known_ids or [])

    def universe(self, bucket: StatusBucket, snapshot: StatusBucket) -> List[str]:
        """Known ids first, then any extra ids from the bucket and snapshot."""
        names = list(self.known_ids)
        seen = set(names)
        for source in (bucket, snapshot):
            for name in source:
                if name not in seen:
                    names.append(name)
                    seen.add(name)
        return names

    def classify(
        self,
        bucket: StatusBucket,
        snapshot: Optional[StatusBucket] = None
    ) -> ClassificationResult:
        """
        Classify the current bucket, falling back to the snapshot.

        Args:
            bucket: Labels from the current poll
            snapshot: Last persisted labels (may be empty)

        Returns:
            ClassificationResult covering every identifier in the universe
        """
        snapshot = snapshot or {}
        result = ClassificationResult()

        for name in self.universe(bucket, snapshot):
            labels = bucket.get(name)
            if labels:
                fraction = critical_fraction(labels)
                result.tiers[name] = classify_fraction(fraction)
                result.sources[name] = TierSource.CURRENT
                result.critical_fractions[name] = fraction
            else:
                result.tiers[name] = classify_first_label(snapshot.get(name))
                result.sources[name] = TierSource.SNAPSHOT

        return result


def merge_snapshot(previous: StatusBucket, bucket: StatusBucket) -> StatusBucket:
    """
    Build the snapshot to persist after a successful pass.

    Identifiers in the current bucket overwrite their previous entries;
    identifiers only in the previous snapshot survive unchanged.
    """
    merged: StatusBucket = {name: list(labels) for name, labels in previous.items()}
    for name, labels in bucket.items():
        if labels:
            merged[name] = list(labels)
    return merged
