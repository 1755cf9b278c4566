"""AggregationEngine - drives every source and merges what they report."""

import logging
from concurrent.futures import ThreadPoolExecutor

from ..config import EngineConfig
from ..errors import InvalidWindowError, SourceUnavailable
from ..window import TimeWindow
from .ledger import ActivityLedger
from .model import ActivityReport, SourceStats

log = logging.getLogger('active_users')


class AggregationEngine:
    """Runs sources in priority order, filters identities, fills the ledger.

    Usage:
        engine = AggregationEngine(IdentityFilter(policy), config=EngineConfig())
        report = engine.run(window, [AuthLogSource(), DirectoryTreeSource("/home", SourceKind.HOME)])

    A failing source never aborts the run: it is noted on the report and
    contributes no observations. The ledger is written only from the thread
    calling :meth:`run`; directory walks fan out to a bounded thread pool.
    """

    FAILURES_SHOWN = 10

    def __init__(self, identity_filter, ledger=None, config=None, executor=None):
        self.identity = identity_filter
        self.ledger = ledger if ledger is not None else ActivityLedger()
        self.config = (config or EngineConfig()).validate()
        self._executor = executor
        self._eligibility = {}

    def _eligible(self, username):
        if username not in self._eligibility:
            self._eligibility[username] = self.identity.is_eligible(username)
        return self._eligibility[username]

    def _make_admit(self, stats):
        progress_every = self.config.progress_every

        def admit(username):
            if stats.checked % progress_every == 0:
                log.info(
                    f"[AggregationEngine]    ...checked {stats.checked}, skipped {stats.skipped_known} "
                    f"already active, {stats.failed} failed"
                )
            if not self._eligible(username):
                stats.ineligible += 1
                return False
            if self.config.skip_known and username in self.ledger:
                stats.skipped_known += 1
                return False
            return True

        return admit

    def _run_source(self, source, window, stats, executor):
        try:
            observations = source.scan(
                window, stats=stats, admit=self._make_admit(stats), executor=executor,
                timeout=self.config.entry_timeout,
            )
            for observation in observations:
                if not self._eligible(observation.username):
                    stats.ineligible += 1
                    continue
                self.ledger.upsert(observation)
                stats.observations += 1
        except SourceUnavailable as e:
            stats.available = False
            stats.notices.append(str(e))
            log.info(f"[AggregationEngine] {source.label} unavailable, contributing nothing: {e}")
        except Exception as e:
            stats.available = False
            stats.notices.append(f"source failed: {e}")
            log.error(f"[AggregationEngine] {source.label} failed, continuing with remaining sources: {e}")

    def _log_failures(self, stats):
        """Per-user details in debug mode, otherwise the first few usernames."""
        if not stats.failures:
            return
        if self.config.debug:
            for failure in stats.failures:
                log.info(f"[AggregationEngine]    DEBUG: {failure.username} failed ({failure.reason}): {failure.detail}")
            return
        shown = [f.username for f in stats.failures[:self.FAILURES_SHOWN]]
        log.info(
            f"[AggregationEngine]    First {len(shown)} users with scan errors "
            f"(run with --debug for details): {', '.join(shown)}"
        )

    def run(self, window, sources):
        """Scan every source for ``window`` and return an ActivityReport."""
        if not isinstance(window, TimeWindow):
            raise InvalidWindowError(f"Expected a TimeWindow, got {type(window).__name__}")

        ordered = sorted(sources, key=lambda s: s.kind.priority)
        all_stats = []
        notices = []
        log.info(f"[AggregationEngine] Finding active users between {window.start} and {window.end}")

        executor = self._executor
        owns_executor = executor is None
        if owns_executor:
            executor = ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="active-users-scan")

        try:
            for index, source in enumerate(ordered, 1):
                stats = SourceStats(source.kind, source.label)
                all_stats.append(stats)
                log.info(f"[AggregationEngine] {index}. Checking {source.label}...")

                self._run_source(source, window, stats, executor)

                notices.extend(f"{source.label}: {notice}" for notice in stats.notices)
                log.info(
                    f"[AggregationEngine]    Checked: {stats.checked}, Ineligible: {stats.ineligible}, "
                    f"Skipped: {stats.skipped_known} already active, Failed: {stats.failed}, "
                    f"Observations: {stats.observations}, Total active: {len(self.ledger)}"
                )
                self._log_failures(stats)
        finally:
            if owns_executor:
                # abandoned walks may still hold a worker; do not wait on them
                executor.shutdown(wait=False, cancel_futures=True)

        report = ActivityReport(window=window, records=self.ledger.snapshot(), stats=all_stats, notices=notices)
        log.info(
            f"[AggregationEngine] Total active users: {report.total_active} "
            f"({report.failed} scan failure(s), {len(notices)} notice(s))"
        )
        return report
