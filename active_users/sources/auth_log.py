"""Successful SSH authentications read from (rotated, compressed) auth logs."""

import glob
import gzip
import logging
import re
from datetime import datetime

from ..activity.model import Observation, SourceKind
from ..errors import SourceUnavailable
from ..window import local_timestamp
from .base import ActivitySource

log = logging.getLogger('active_users')

DEFAULT_PATTERNS = ("/var/log/secure*",)
DEFAULT_MARKER = "Accepted"

_SYSLOG_PREFIX = re.compile(r"^([A-Z][a-z]{2})\s+(\d{1,2})\s+(\d{2}:\d{2}:\d{2})\s")
_RFC3339_PREFIX = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:?\d{2})?\s"
)


def parse_log_timestamp(line, year):
    """Unix timestamp of a log line's leading date, or None if unparseable.

    Classic syslog prefixes carry no year; ``year`` fills it in.
    """
    match = _SYSLOG_PREFIX.match(line)
    if match:
        month, day, clock = match.groups()
        try:
            moment = datetime.strptime(f"{year} {month} {int(day)} {clock}", "%Y %b %d %H:%M:%S")
        except ValueError:
            return None
        return local_timestamp(moment)

    match = _RFC3339_PREFIX.match(line)
    if match:
        stamp, _fraction, offset = match.groups()
        try:
            if offset:
                offset = "+00:00" if offset == "Z" else offset
                if ":" not in offset:
                    offset = f"{offset[:3]}:{offset[3:]}"
                return int(datetime.fromisoformat(stamp + offset).timestamp())
            return local_timestamp(datetime.fromisoformat(stamp))
        except ValueError:
            return None
    return None


def extract_username(line):
    """Token right after the first literal ``for``, or '' if there is none."""
    tokens = line.split()
    for i, token in enumerate(tokens[:-1]):
        if token == "for":
            return tokens[i + 1]
    return ""


class AuthLogSource(ActivitySource):
    """Scans auth logs for lines containing ``marker`` (sshd "Accepted ...")."""

    kind = SourceKind.SSH

    def __init__(self, patterns=DEFAULT_PATTERNS, marker=DEFAULT_MARKER, year=None):
        if isinstance(patterns, str):
            patterns = (patterns,)
        self.patterns = tuple(patterns)
        self.marker = marker
        self.year = year

    def log_files(self):
        """Existing files matching the configured patterns, sorted, de-duplicated."""
        paths = set()
        for pattern in self.patterns:
            paths.update(glob.glob(pattern))
        return sorted(paths)

    def _open(self, path):
        if path.endswith(".gz"):
            return gzip.open(path, "rt", encoding="utf-8", errors="replace")
        return open(path, "r", encoding="utf-8", errors="replace")

    def _read_lines(self, stats):
        paths = self.log_files()
        if not paths:
            raise SourceUnavailable(f"No auth log matches {', '.join(self.patterns)}")

        readable = 0
        for path in paths:
            try:
                with self._open(path) as fh:
                    readable += 1
                    for line in fh:
                        if self.marker in line:
                            yield line
            except (OSError, EOFError) as e:
                log.warning(f"[AuthLogSource] Cannot read {path}: {e}")
                if stats is not None:
                    stats.notices.append(f"unreadable auth log {path}: {e}")

        if readable == 0:
            raise SourceUnavailable(f"No readable auth log among {len(paths)} file(s)")

    def scan(self, window, stats=None, admit=None, executor=None, timeout=None):
        year = self.year or datetime.now().year
        start_ts, end_ts = window.start_ts, window.end_ts

        for line in self._read_lines(stats):
            ts = parse_log_timestamp(line, year)
            if ts is None:
                continue
            username = extract_username(line)
            if not username:
                continue
            if not start_ts <= ts <= end_ts:
                continue
            if stats is not None:
                stats.checked += 1
            yield Observation(username, ts, self.kind)
