"""Functional tests for ActivityLedger - max-merge upserts and sorted snapshots."""

import threading

from active_users.activity.ledger import ActivityLedger
from active_users.activity.model import Observation, SourceKind


class TestUpsert:
    def test_first_observation_creates_record(self):
        ledger = ActivityLedger()
        record = ledger.upsert(Observation("alice", 100, SourceKind.SSH))
        assert record.last_activity == 100
        assert record.sources == (SourceKind.SSH,)
        assert "alice" in ledger

    def test_merge_keeps_max_and_unions_sources(self):
        ledger = ActivityLedger()
        ledger.upsert(Observation("alice", 100, SourceKind.SSH))
        ledger.upsert(Observation("alice", 200, SourceKind.HOME))
        record = ledger.get("alice")
        assert record.last_activity == 200
        assert record.sources == (SourceKind.SSH, SourceKind.HOME)
        assert record.sources_label == "ssh,home"

    def test_older_observation_does_not_lower_timestamp(self):
        ledger = ActivityLedger()
        ledger.upsert(Observation("bob", 300, SourceKind.HOME))
        ledger.upsert(Observation("bob", 100, SourceKind.SSH))
        record = ledger.get("bob")
        assert record.last_activity == 300
        assert record.sources == (SourceKind.HOME, SourceKind.SSH)

    def test_repeated_source_not_duplicated(self):
        ledger = ActivityLedger()
        for t in (5, 9, 7):
            ledger.upsert(Observation("carol", t, SourceKind.SSH))
        assert ledger.get("carol").sources == (SourceKind.SSH,)
        assert ledger.get("carol").last_activity == 9
        assert len(ledger) == 1

    def test_absent_user(self):
        assert ActivityLedger().get("nobody") is None


class TestSnapshot:
    def test_sorted_by_time_then_name(self):
        ledger = ActivityLedger()
        ledger.upsert(Observation("zed", 50, SourceKind.SSH))
        ledger.upsert(Observation("bob", 100, SourceKind.SSH))
        ledger.upsert(Observation("amy", 100, SourceKind.HOME))
        ledger.upsert(Observation("cat", 10, SourceKind.SCRATCH))
        assert [r.username for r in ledger.snapshot()] == ["cat", "zed", "amy", "bob"]

    def test_snapshot_is_a_copy(self):
        ledger = ActivityLedger()
        ledger.upsert(Observation("amy", 1, SourceKind.SSH))
        snap = ledger.snapshot()
        ledger.upsert(Observation("bob", 2, SourceKind.SSH))
        assert len(snap) == 1


class TestConcurrency:
    def test_parallel_upserts_lose_nothing(self):
        """Concurrent upserts for shared users keep the true max."""
        ledger = ActivityLedger()
        users = [f"user{i}" for i in range(10)]

        def worker(offset):
            for t in range(200):
                for user in users:
                    ledger.upsert(Observation(user, t * 10 + offset, SourceKind.HOME))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ledger) == 10
        assert all(r.last_activity == 199 * 10 + 7 for r in ledger.snapshot())
