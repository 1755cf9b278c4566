"""ActivityLedger - one authoritative record per user for a single run."""

import threading

from .model import ActivityRecord


class ActivityLedger:
    """Username -> ActivityRecord table with max-merge upserts.

    Usage:
        ledger = ActivityLedger()
        ledger.upsert(observation)
        records = ledger.snapshot()
    """

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def upsert(self, observation):
        """Create or merge the record for ``observation.username``."""
        with self._lock:
            existing = self._records.get(observation.username)
            if existing is None:
                record = ActivityRecord(
                    username=observation.username,
                    last_activity=observation.timestamp,
                    sources=(observation.source,),
                )
            else:
                sources = existing.sources
                if observation.source not in sources:
                    sources = sources + (observation.source,)
                record = ActivityRecord(
                    username=existing.username,
                    last_activity=max(existing.last_activity, observation.timestamp),
                    sources=sources,
                )
            self._records[observation.username] = record
            return record

    def get(self, username):
        with self._lock:
            return self._records.get(username)

    def snapshot(self):
        """Records sorted by last activity, ties broken by username."""
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: (r.last_activity, r.username))

    def __contains__(self, username):
        with self._lock:
            return username in self._records

    def __len__(self):
        with self._lock:
            return len(self._records)
