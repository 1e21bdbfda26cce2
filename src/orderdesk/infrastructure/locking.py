"""Locks shared by threads and by separate ``orderdesk`` processes.

``file_lock`` takes an exclusive ``flock`` on a lock file.  ``KeyedLock``
keeps one re-entrant lock per key and, when given a directory, backs the
outermost hold of each key with a lock file so other processes wait too.
"""

from __future__ import annotations

import fcntl
import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@contextmanager
def file_lock(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive lock on *lock_path* until the block exits."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


class KeyedLock:
    """Serializes work per key while letting different keys run in parallel.

    In-process locks are dropped from the registry once nobody holds or
    waits on them.  Lock files stay on disk; they are empty.
    """

    def __init__(self, lock_dir: Path | None = None) -> None:
        self._lock_dir = lock_dir
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._users: dict[str, int] = {}
        self._depth: dict[str, int] = {}

    def lock_path(self, key: str) -> Path | None:
        if self._lock_dir is None:
            return None
        return self._lock_dir / (_UNSAFE_CHARS.sub("_", key) + ".lock")

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.RLock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                with self._guard:
                    depth = self._depth.get(key, 0)
                    self._depth[key] = depth + 1
                try:
                    lock_path = self.lock_path(key)
                    if depth == 0 and lock_path is not None:
                        with file_lock(lock_path):
                            yield
                    else:
                        yield
                finally:
                    with self._guard:
                        self._depth[key] -= 1
                        if self._depth[key] == 0:
                            del self._depth[key]
        finally:
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
