"""Account eligibility: which usernames denote real, in-scope human accounts."""

import logging
import pwd
import re
from dataclasses import dataclass

log = logging.getLogger('active_users')

DEFAULT_MIN_UID = 1000
NOBODY_UID = 65534
DEFAULT_EXCLUDED_PREFIXES = ("dataset_", "test_", "tmp_", "backup_")
DEFAULT_EXCLUDED_NAMES = frozenset({"root", "bin", "daemon", "sync", "halt", "lost+found"})

REASON_EMPTY = "empty"
REASON_NUMERIC = "numeric"
REASON_PREFIX = "excluded-prefix"
REASON_NAME = "excluded-name"
REASON_SYSTEM_UID = "system-uid"
REASON_NOBODY = "nobody-uid"
REASON_UNKNOWN = "unknown-account"
REASON_UNKNOWN_PATTERN = "unknown-account-pattern"

_NUMERIC = re.compile(r"^[0-9]+$")
_LENIENT_NAME = re.compile(r"^[a-z]")


def passwd_uid(username):
    """Resolve a UID through NSS (local passwd, LDAP, SSSD). None if unknown."""
    try:
        return pwd.getpwnam(username).pw_uid
    except (KeyError, TypeError, ValueError):
        return None


@dataclass(frozen=True)
class IdentityPolicy:
    """Thresholds and exclusion lists applied by :class:`IdentityFilter`.

    ``lenient_fallback`` controls accounts the resolver does not know:
    strict (False) rejects them, lenient (True) accepts names starting with
    a lowercase letter.
    """

    min_uid: int = DEFAULT_MIN_UID
    nobody_uid: int = NOBODY_UID
    excluded_prefixes: tuple = DEFAULT_EXCLUDED_PREFIXES
    excluded_names: frozenset = DEFAULT_EXCLUDED_NAMES
    lenient_fallback: bool = False


@dataclass(frozen=True)
class IdentityDecision:
    accepted: bool
    reason: str = ""

    def __bool__(self):
        return self.accepted


ACCEPT = IdentityDecision(True)


class IdentityFilter:
    """Stateless predicate over candidate usernames.

    Usage:
        identity = IdentityFilter(IdentityPolicy(lenient_fallback=True))
        if identity.is_eligible("alice"):
            ...
    """

    def __init__(self, policy=None, resolve_uid=passwd_uid):
        self.policy = policy or IdentityPolicy()
        self.resolve_uid = resolve_uid

    def decide(self, username, uid=None):
        """Apply the rejection rules in order, stopping at the first match."""
        policy = self.policy
        if not username:
            return IdentityDecision(False, REASON_EMPTY)
        if _NUMERIC.match(username):
            return IdentityDecision(False, REASON_NUMERIC)
        if username.startswith(tuple(policy.excluded_prefixes)):
            return IdentityDecision(False, REASON_PREFIX)
        if username in policy.excluded_names:
            return IdentityDecision(False, REASON_NAME)

        if uid is None:
            uid = self.resolve_uid(username)

        if uid is not None:
            if uid < policy.min_uid:
                return IdentityDecision(False, REASON_SYSTEM_UID)
            if uid == policy.nobody_uid:
                return IdentityDecision(False, REASON_NOBODY)
            return ACCEPT

        if not policy.lenient_fallback:
            return IdentityDecision(False, REASON_UNKNOWN)
        if _LENIENT_NAME.match(username):
            return ACCEPT
        return IdentityDecision(False, REASON_UNKNOWN_PATTERN)

    def is_eligible(self, username, uid=None):
        decision = self.decide(username, uid)
        if not decision.accepted:
            log.debug(f"[IdentityFilter] Rejected {username!r}: {decision.reason}")
        return decision.accepted
