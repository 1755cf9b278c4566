"""File-access strategies used to walk a user's storage tree.

DirectAccess walks in-process with the scanner's own privileges.
SudoFindAccess re-runs the walk as the target account via ``sudo -n`` and
``find -L`` so home directories with restrictive modes can still be read.
"""

import logging
import os
import subprocess
import time

from ..errors import EntryTraversalError, EntryTraversalTimeout
from .base import MatchStrategy

log = logging.getLogger('active_users')


class DirectAccess:
    """In-process walk following symlinks, with a cooperative deadline.

    The deadline is checked before every directory entry, so wide
    directories are bounded too. A single blocking syscall (hung NFS stat)
    cannot be interrupted here; the directory source gives up on such a
    worker once it overruns its deadline.
    """

    @staticmethod
    def _entries(it, path, errors):
        """Yield entries lazily; a listing error mid-directory ends that directory."""
        while True:
            try:
                entry = next(it)
            except StopIteration:
                return
            except OSError as e:
                errors.append(e)
                return
            yield entry

    def find(self, root, username, window, strategy, timeout):
        """Return the matching mtime under ``root`` or None if nothing matched.

        Raises EntryTraversalTimeout when the deadline passes and
        EntryTraversalError when the tree cannot be read and nothing matched.
        """
        deadline = time.monotonic() + timeout
        lower, upper = window.start_ts, window.end_ts
        latest = None
        errors = []
        visited = set()
        stack = [root]

        while stack:
            if time.monotonic() > deadline:
                raise EntryTraversalTimeout(f"{root}: no result after {timeout}s")
            path = stack.pop()
            try:
                st = os.stat(path)
                key = (st.st_dev, st.st_ino)
                if key in visited:
                    continue
                visited.add(key)
                it = os.scandir(path)
            except OSError as e:
                if path == root:
                    raise EntryTraversalError(f"{root}: {e.strerror or e}") from e
                errors.append(e)
                continue

            with it:
                for entry in self._entries(it, path, errors):
                    if time.monotonic() > deadline:
                        raise EntryTraversalTimeout(f"{root}: no result after {timeout}s")
                    try:
                        if entry.is_dir(follow_symlinks=True):
                            stack.append(entry.path)
                            continue
                        if not entry.is_file(follow_symlinks=True):
                            continue
                        mtime = entry.stat(follow_symlinks=True).st_mtime
                    except OSError as e:
                        errors.append(e)
                        continue
                    if lower < mtime <= upper:
                        if strategy is MatchStrategy.EXISTS:
                            return int(mtime)
                        if latest is None or mtime > latest:
                            latest = mtime

        if latest is not None:
            return int(latest)
        if errors:
            first = errors[0]
            raise EntryTraversalError(
                f"{root}: {len(errors)} unreadable path(s), first: {first.filename}: {first.strerror}"
            )
        return None


class SudoFindAccess:
    """Walks as the owning account: ``sudo -n -u <user> find -L <root> ...``."""

    def __init__(self, sudo="sudo", find="find"):
        self.sudo = sudo
        self.find_cmd = find

    def build_command(self, root, username, window, strategy):
        cmd = [
            self.sudo, "-n", "-u", username,
            self.find_cmd, "-L", root, "-type", "f",
            "-newermt", window.start.isoformat(),
            "!", "-newermt", f"{window.end.isoformat()} 23:59:59",
        ]
        if strategy is MatchStrategy.EXISTS:
            cmd += ["-printf", "%T@\\n", "-quit"]
        else:
            cmd += ["-printf", "%T@\\n"]
        return cmd

    def find(self, root, username, window, strategy, timeout):
        cmd = self.build_command(root, username, window, strategy)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise EntryTraversalTimeout(f"{root}: find timed out after {timeout}s") from e
        except OSError as e:
            raise EntryTraversalError(f"{root}: cannot run {cmd[0]}: {e}") from e

        mtimes = []
        for line in result.stdout.splitlines():
            try:
                mtimes.append(float(line.strip()))
            except ValueError:
                continue

        if mtimes:
            return int(max(mtimes))
        if result.returncode != 0:
            detail = result.stderr.strip().splitlines()
            raise EntryTraversalError(
                f"{root}: exit {result.returncode}" + (f": {detail[-1]}" if detail else "")
            )
        return None
