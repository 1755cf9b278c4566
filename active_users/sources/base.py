"""Common interface for evidence sources."""

import enum


class ActivitySource:
    """One evidence channel producing raw observations for a window.

    Subclasses implement :meth:`scan` as a generator that re-reads the
    underlying data on every call.
    """

    kind = None

    @property
    def label(self):
        return self.kind.value if self.kind else self.__class__.__name__

    def scan(self, window, stats=None, admit=None, executor=None, timeout=None):
        """Yield :class:`Observation` objects for ``window``.

        Args:
            window: TimeWindow bounding the observations
            stats: optional SourceStats updated in place
            admit: optional callable(username) -> bool run before expensive work
            executor: optional thread pool for per-entry parallelism
            timeout: default per-entry timeout in seconds, for sources that walk entries
        """
        raise NotImplementedError

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.label}>"


class MatchStrategy(enum.Enum):
    """How a directory tree's files turn into an activity timestamp.

    EXISTS stops at the first in-window file and reports the window end as a
    conservative proxy. LATEST walks the whole tree and reports the newest
    in-window modification time.
    """

    EXISTS = "exists"
    LATEST = "latest"
