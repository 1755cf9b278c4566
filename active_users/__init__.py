"""Multi-source account activity scanner for shared hosts."""

__version__ = "1.0.0"

from .activity import ActivityLedger, ActivityRecord, ActivityReport, AggregationEngine, Observation, SourceKind
from .config import EngineConfig
from .identity import IdentityFilter, IdentityPolicy, passwd_uid
from .sources import AuthLogSource, DirectoryTreeSource, MatchStrategy
from .window import TimeWindow

__all__ = [
    "ActivityLedger",
    "ActivityRecord",
    "ActivityReport",
    "AggregationEngine",
    "Observation",
    "SourceKind",
    "EngineConfig",
    "IdentityFilter",
    "IdentityPolicy",
    "passwd_uid",
    "AuthLogSource",
    "DirectoryTreeSource",
    "MatchStrategy",
    "TimeWindow",
]
