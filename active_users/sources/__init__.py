"""Evidence sources: auth logs and per-user directory trees."""

from .base import ActivitySource, MatchStrategy
from .access import DirectAccess, SudoFindAccess
from .auth_log import AuthLogSource
from .directory_tree import DirectoryTreeSource

__all__ = [
    "ActivitySource",
    "MatchStrategy",
    "DirectAccess",
    "SudoFindAccess",
    "AuthLogSource",
    "DirectoryTreeSource",
]
