"""Single JSON document holding every collection of the inventory core.

Keeping orders, batches, pools and movements in one file lets a commit
replace all of them at once: the new document is written to a
temporary file and moved over the old one with ``os.replace``.
Writers serialize on an exclusive ``flock`` of a sibling lock file.
"""

from __future__ import annotations

import fcntl
import json
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from stockflow.domain.exceptions import ConflictError


def empty_document() -> dict:
    return {"orders": {}, "batches": {}, "pools": {}, "movements": []}


class JsonDocumentStore:

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._file_path = file_path
        self._lock_path = file_path.with_name(file_path.name + ".lock")
        self._lock_timeout = lock_timeout
        self._ensure_file()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def read(self) -> dict:
        """Load the last committed document."""
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    @contextmanager
    def transaction(self) -> Iterator[dict]:
        """Yield the current document under the write lock.

        The document is persisted when the block exits normally and
        discarded if it raises.
        """
        with self._locked():
            document = self.read()
            yield document
            self._persist(document)

    # --- File helpers ---------------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        deadline = time.monotonic() + self._lock_timeout
        with open(self._lock_path, "a+") as lock_file:
            while True:
                try:
                    fcntl.flock(lock_file, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise ConflictError(
                            f"Timed out after {self._lock_timeout}s waiting for "
                            f"{self._file_path.name}"
                        ) from None
                    time.sleep(0.01)
            try:
                yield
            finally:
                fcntl.flock(lock_file, fcntl.LOCK_UN)

    def _persist(self, document: dict) -> None:
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist(empty_document())
