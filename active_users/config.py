"""Engine configuration, read from ACTIVE_USERS_* environment variables."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError
from .identity import DEFAULT_MIN_UID

log = logging.getLogger('active_users')

ENV_PREFIX = "ACTIVE_USERS_"


def _get_env_int(name, default, min_val, max_val):
    """Get integer from environment with validation."""
    try:
        value = int(os.environ.get(name, default))
        if value < min_val or value > max_val:
            log.info(f"[EngineConfig] {name}={value} out of range ({min_val}-{max_val}), using default {default}")
            return default
        return value
    except (ValueError, TypeError):
        log.info(f"[EngineConfig] {name} invalid, using default {default}")
        return default


def _get_env_flag(name, default=None):
    """True/False for a recognised flag value, ``default`` when unset or unrecognised."""
    value = os.environ.get(name)
    if value is None:
        return default
    if value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if value.strip().lower() in ("0", "false", "no", "off", ""):
        return False
    log.info(f"[EngineConfig] {name}={value!r} is not a flag, using default {default}")
    return default


@dataclass
class EngineConfig:
    """Run-time knobs for :class:`AggregationEngine`.

    entry_timeout: seconds allowed per top-level directory walk
    max_workers: bound on concurrent directory walks
    progress_every: log a progress line every N checked entries
    skip_known: skip walking directories of users already seen by an
        earlier source (faster, but the reported sources set is incomplete)
    lenient_fallback: accept unresolvable usernames; None leaves it to the
        host profile
    debug: log per-user failure details after each source
    """

    DEFAULT_ENTRY_TIMEOUT = 10
    DEFAULT_MAX_WORKERS = 4
    DEFAULT_PROGRESS_EVERY = 100

    entry_timeout: int = DEFAULT_ENTRY_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    progress_every: int = DEFAULT_PROGRESS_EVERY
    min_uid: int = DEFAULT_MIN_UID
    lenient_fallback: Optional[bool] = None
    skip_known: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls):
        config = cls(
            entry_timeout=_get_env_int(f"{ENV_PREFIX}ENTRY_TIMEOUT", cls.DEFAULT_ENTRY_TIMEOUT, 1, 600),
            max_workers=_get_env_int(f"{ENV_PREFIX}MAX_WORKERS", cls.DEFAULT_MAX_WORKERS, 1, 64),
            progress_every=_get_env_int(f"{ENV_PREFIX}PROGRESS_EVERY", cls.DEFAULT_PROGRESS_EVERY, 1, 100000),
            min_uid=_get_env_int(f"{ENV_PREFIX}MIN_UID", DEFAULT_MIN_UID, 0, 2 ** 31),
            lenient_fallback=_get_env_flag(f"{ENV_PREFIX}LENIENT"),
            skip_known=_get_env_flag(f"{ENV_PREFIX}SKIP_KNOWN", False),
        )
        log.info(
            f"[EngineConfig] Config: entry_timeout={config.entry_timeout}s, "
            f"max_workers={config.max_workers}, lenient={config.lenient_fallback}, "
            f"skip_known={config.skip_known}"
        )
        return config

    def validate(self):
        """Raise ConfigurationError for values the engine cannot run with."""
        if not isinstance(self.entry_timeout, (int, float)) or self.entry_timeout <= 0:
            raise ConfigurationError(f"entry_timeout must be > 0, got {self.entry_timeout!r}")
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers!r}")
        if not isinstance(self.progress_every, int) or self.progress_every < 1:
            raise ConfigurationError(f"progress_every must be >= 1, got {self.progress_every!r}")
        if not isinstance(self.min_uid, int) or self.min_uid < 0:
            raise ConfigurationError(f"min_uid must be >= 0, got {self.min_uid!r}")
        return self
