"""Activity data model - observations, merged records, run report."""

import enum
from dataclasses import dataclass, field
from datetime import datetime

REASON_TIMEOUT = "timeout"
REASON_OTHER = "other"


class SourceKind(enum.Enum):
    """Evidence channel. Declaration order is the scan priority order."""

    SSH = "ssh"
    HOME = "home"
    SCRATCH = "scratch"

    @property
    def priority(self):
        return list(SourceKind).index(self)


def format_timestamp(ts):
    try:
        return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return "unknown"


@dataclass(frozen=True)
class Observation:
    """One (user, timestamp, source) activity signal."""

    username: str
    timestamp: int
    source: SourceKind


@dataclass(frozen=True)
class ActivityRecord:
    """Merged last-seen state for one user. ``sources`` keeps insertion order."""

    username: str
    last_activity: int
    sources: tuple

    @property
    def sources_label(self):
        return ",".join(s.value for s in self.sources)

    @property
    def last_activity_text(self):
        return format_timestamp(self.last_activity)


@dataclass(frozen=True)
class ScanFailure:
    username: str
    source: SourceKind
    reason: str
    detail: str = ""


@dataclass
class SourceStats:
    """Per-source counters collected during one run."""

    source: SourceKind
    label: str
    available: bool = True
    checked: int = 0
    skipped_known: int = 0
    ineligible: int = 0
    failed: int = 0
    observations: int = 0
    notices: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    def add_failure(self, failure):
        self.failures.append(failure)
        self.failed += 1


@dataclass
class ActivityReport:
    """Everything the renderer needs: sorted records, counters, failures."""

    window: object
    records: list
    stats: list
    notices: list = field(default_factory=list)

    @property
    def total_active(self):
        return len(self.records)

    @property
    def checked(self):
        return sum(s.checked for s in self.stats)

    @property
    def skipped(self):
        return sum(s.skipped_known + s.ineligible for s in self.stats)

    @property
    def failures(self):
        return [f for s in self.stats for f in s.failures]

    @property
    def failed(self):
        return sum(s.failed for s in self.stats)

    def first(self, k=5):
        return self.records[:k]

    def last(self, k=5):
        return self.records[-k:] if k > 0 else []

    def failed_usernames(self):
        return sorted({f.username for f in self.failures})
