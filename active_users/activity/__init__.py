"""Activity aggregation: data model, ledger and engine."""

from .model import (
    ActivityRecord,
    ActivityReport,
    Observation,
    ScanFailure,
    SourceKind,
    SourceStats,
)
from .ledger import ActivityLedger
from .engine import AggregationEngine

__all__ = [
    "ActivityRecord",
    "ActivityReport",
    "Observation",
    "ScanFailure",
    "SourceKind",
    "SourceStats",
    "ActivityLedger",
    "AggregationEngine",
]
