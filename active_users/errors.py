"""Error taxonomy for the activity scan.

Only ``InvalidWindowError`` and ``ConfigurationError`` are allowed to abort a
run. Everything else is caught by the engine and attached to the report.
"""


class ActiveUsersError(Exception):
    """Base class for all active_users errors."""


class InvalidWindowError(ActiveUsersError, ValueError):
    """Window start is after its end, or a date could not be parsed."""


class ConfigurationError(ActiveUsersError, ValueError):
    """Engine or source configuration is malformed."""


class SourceUnavailable(ActiveUsersError):
    """A whole evidence source (log set, storage root) cannot be read."""


class EntryTraversalTimeout(ActiveUsersError):
    """Walking one top-level entry exceeded its deadline."""


class EntryTraversalError(ActiveUsersError):
    """Walking one top-level entry failed (permissions, I/O, stale mount)."""
