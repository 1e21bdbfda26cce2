"""A single JSON document holding orders, inventory and the catalog.

Keeping everything in one file lets a unit of work replace orders and
stock counts with one atomic ``os.replace``.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from orderdesk.infrastructure.locking import KeyedLock, file_lock

SECTIONS = ("orders", "inventory", "products")


def empty_document() -> dict:
    return {section: {} for section in SECTIONS}


class JsonStore:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._write_guard = threading.Lock()
        lock_dir = file_path.parent / ".locks"
        self._store_lock_path = lock_dir / (file_path.name + ".lock")
        self.order_locks = KeyedLock(lock_dir / "orders")

    @property
    def file_path(self) -> Path:
        return self._file_path

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        """Hold the store for one read-merge-write cycle.

        Excludes other threads and other processes using the same file.
        """
        with self._write_guard, file_lock(self._store_lock_path):
            yield

    def read(self) -> dict:
        """Return a fresh copy of the whole document.

        Raises OSError if the file cannot be read and ValueError if it
        does not hold a JSON object.
        """
        if not self._file_path.exists():
            return empty_document()
        doc = json.loads(self._file_path.read_text(encoding="utf-8"))
        if not isinstance(doc, dict):
            raise ValueError(f"{self._file_path} does not contain a JSON object")
        for section in SECTIONS:
            doc.setdefault(section, {})
        return doc

    def write(self, doc: dict) -> None:
        """Replace the document atomically (write-to-temp-then-rename)."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=".store_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self._file_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
