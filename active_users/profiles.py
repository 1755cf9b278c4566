"""Host profiles: which sources and identity policy a given machine uses."""

import socket

from .activity.model import SourceKind
from .identity import IdentityPolicy
from .sources import AuthLogSource, DirectAccess, DirectoryTreeSource, MatchStrategy, SudoFindAccess

CLUSTER = "cluster"
WORKSTATION = "workstation"

# hostname prefix -> profile
HOST_PREFIXES = (
    ("spydur", CLUSTER),
    ("arachne", CLUSTER),
    ("spiderweb", WORKSTATION),
)

PROFILES = {
    CLUSTER: {
        "description": "HPC cluster: ssh logs, /home and /scratch",
        "auth_logs": ("/var/log/secure*",),
        "roots": (("/home", SourceKind.HOME), ("/scratch", SourceKind.SCRATCH)),
        "strategy": MatchStrategy.EXISTS,
        "lenient_fallback": True,
        "sudo": True,
    },
    WORKSTATION: {
        "description": "Workstation server: /home only, newest file per user",
        "auth_logs": (),
        "roots": (("/home", SourceKind.HOME),),
        "strategy": MatchStrategy.LATEST,
        "lenient_fallback": False,
        "sudo": False,
    },
}


def short_hostname():
    return socket.gethostname().split(".")[0]


def detect_profile(hostname=None):
    """Profile name for ``hostname`` (default: this host), or None if unknown."""
    hostname = (hostname if hostname is not None else short_hostname()).lower()
    for prefix, profile in HOST_PREFIXES:
        if hostname.startswith(prefix):
            return profile
    return None


def _profile(name):
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown profile {name!r}, expected one of: {', '.join(sorted(PROFILES))}") from None


def profile_policy(name, min_uid=None, lenient_fallback=None):
    """IdentityPolicy for a profile, with optional overrides."""
    profile = _profile(name)
    kwargs = {
        "lenient_fallback": profile["lenient_fallback"] if lenient_fallback is None else lenient_fallback,
    }
    if min_uid is not None:
        kwargs["min_uid"] = min_uid
    return IdentityPolicy(**kwargs)


def build_sources(name, strategy=None, access=None, timeout=None):
    """Source list for a profile, in priority order.

    ``timeout=None`` leaves directory sources on the engine's entry timeout.
    """
    profile = _profile(name)
    strategy = MatchStrategy(strategy) if strategy is not None else profile["strategy"]
    if access is None:
        access = SudoFindAccess() if profile["sudo"] else DirectAccess()

    sources = []
    if profile["auth_logs"]:
        sources.append(AuthLogSource(profile["auth_logs"]))
    for root, kind in profile["roots"]:
        sources.append(DirectoryTreeSource(root, kind, strategy=strategy, access=access, timeout=timeout))
    return sources
