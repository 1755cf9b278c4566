"""Per-user storage areas (/home, /scratch) scanned for recent file changes."""

import logging
import os
import time
from concurrent.futures import FIRST_COMPLETED, wait

from ..activity.model import REASON_OTHER, REASON_TIMEOUT, Observation, ScanFailure
from ..errors import EntryTraversalError, EntryTraversalTimeout, SourceUnavailable
from .access import DirectAccess
from .base import ActivitySource, MatchStrategy

log = logging.getLogger('active_users')

DEFAULT_ENTRY_TIMEOUT = 10
RESERVED_NAMES = frozenset({"lost+found"})


class DirectoryTreeSource(ActivitySource):
    """One observation per top-level directory with an in-window file.

    The directory's base name is the candidate username. Each entry gets its
    own traversal deadline; a timeout or read error is recorded as a
    per-user failure and never stops the scan of sibling entries.

    ``timeout=None`` defers to the timeout passed to :meth:`scan` (the
    engine's configured entry timeout). With a thread pool, a worker still
    running ``STUCK_GRACE`` seconds past its deadline is abandoned and
    reported as a timeout.
    """

    POLL_INTERVAL = 0.5
    STUCK_GRACE = 5.0

    def __init__(self, root, kind, strategy=MatchStrategy.EXISTS, access=None,
                 timeout=None):
        self.root = root
        self.kind = kind
        self.strategy = MatchStrategy(strategy)
        self.access = access or DirectAccess()
        self.timeout = timeout

    @property
    def label(self):
        return f"{self.kind.value} ({self.root})"

    def candidates(self):
        """Sorted (username, path) pairs for the root's top-level directories."""
        try:
            with os.scandir(self.root) as it:
                entries = list(it)
        except OSError as e:
            raise SourceUnavailable(f"Cannot list {self.root}: {e.strerror or e}") from e

        found = []
        for entry in entries:
            if entry.name in RESERVED_NAMES:
                continue
            try:
                if not entry.is_dir(follow_symlinks=True):
                    continue
            except OSError:
                continue
            found.append((entry.name, entry.path))
        return sorted(found)

    def _walk(self, username, path, window, timeout, started=None):
        if started is not None:
            started[username] = time.monotonic()
        return self.access.find(path, username, window, self.strategy, timeout)

    def _observation(self, username, mtime, window):
        if mtime is None:
            return None
        if self.strategy is MatchStrategy.EXISTS:
            return Observation(username, window.end_ts, self.kind)
        return Observation(username, mtime, self.kind)

    def _failure(self, username, error, stats):
        reason = REASON_TIMEOUT if isinstance(error, EntryTraversalTimeout) else REASON_OTHER
        failure = ScanFailure(username, self.kind, reason, str(error))
        log.debug(f"[DirectoryTreeSource] {username} failed ({reason}): {error}")
        if stats is not None:
            stats.add_failure(failure)
        return failure

    def effective_timeout(self, timeout=None):
        """Own timeout if set, else the caller's, else the default."""
        if self.timeout is not None:
            return self.timeout
        return timeout if timeout is not None else DEFAULT_ENTRY_TIMEOUT

    def scan(self, window, stats=None, admit=None, executor=None, timeout=None):
        timeout = self.effective_timeout(timeout)
        admitted = []
        for username, path in self.candidates():
            if stats is not None:
                stats.checked += 1
            if admit is not None and not admit(username):
                continue
            admitted.append((username, path))

        if executor is None:
            for username, path in admitted:
                try:
                    mtime = self._walk(username, path, window, timeout)
                except (EntryTraversalTimeout, EntryTraversalError, OSError) as e:
                    self._failure(username, e, stats)
                    continue
                observation = self._observation(username, mtime, window)
                if observation is not None:
                    yield observation
            return

        # username -> monotonic start time, written by the worker thread
        started = {}
        futures = {
            executor.submit(self._walk, username, path, window, timeout, started): username
            for username, path in admitted
        }
        pending = set(futures)
        while pending:
            done, pending = wait(pending, timeout=self.POLL_INTERVAL, return_when=FIRST_COMPLETED)
            for future in done:
                username = futures[future]
                try:
                    mtime = future.result()
                except (EntryTraversalTimeout, EntryTraversalError, OSError) as e:
                    self._failure(username, e, stats)
                    continue
                observation = self._observation(username, mtime, window)
                if observation is not None:
                    yield observation

            now = time.monotonic()
            for future in list(pending):
                username = futures[future]
                began = started.get(username)
                if began is not None and now - began > timeout + self.STUCK_GRACE:
                    pending.discard(future)
                    future.cancel()
                    self._failure(
                        username,
                        EntryTraversalTimeout(f"{username}: walk did not return within {timeout}s"),
                        stats,
                    )
