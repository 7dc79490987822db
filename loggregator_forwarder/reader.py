"""Read NDJSON container log records, once or by following a file."""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Callable

logger = logging.getLogger(__name__)


def parse_record(line: str) -> dict | None:
    """Decode one NDJSON line. Returns None for blank or non-object lines."""
    stripped = line.strip()
    if not stripped:
        return None
    try:
        record = json.loads(stripped)
    except json.JSONDecodeError:
        logger.warning("Skipping undecodable line: %s", stripped[:200])
        return None
    if not isinstance(record, dict):
        logger.warning("Skipping non-object record: %s", stripped[:200])
        return None
    return record


def read_batch(path: str) -> list[dict]:
    """Read every decodable record from a file."""
    with open(path, "r", encoding="utf-8") as f:
        records = (parse_record(line) for line in f)
        return [r for r in records if r is not None]


class RecordTailer:
    """Follows an NDJSON file and calls *callback* with each new record.

    Starts at the end of the file once it exists. A changed inode (rotation)
    drains the old handle and reopens from the start; a size smaller than the
    read position (truncation) rewinds. Undecodable lines go to *on_invalid*.
    """

    def __init__(
        self,
        path: str,
        shutdown_event: threading.Event,
        callback: Callable[[dict], None],
        poll_interval: float = 0.5,
        on_invalid: Callable[[str], None] | None = None,
    ):
        self._path = path
        self._shutdown = shutdown_event
        self._callback = callback
        self._poll_interval = poll_interval
        self._on_invalid = on_invalid
        self._file = None

    def run(self):
        """Blocks until shutdown_event is set."""
        while not os.path.exists(self._path):
            if self._shutdown.wait(self._poll_interval):
                return

        self._file = open(self._path, "r", encoding="utf-8")
        self._file.seek(0, os.SEEK_END)
        try:
            while not self._shutdown.is_set():
                self._follow_moves()
                line = self._file.readline()
                if line:
                    self._handle_line(line)
                else:
                    self._shutdown.wait(self._poll_interval)
        finally:
            self._file.close()

    def _handle_line(self, line: str):
        if not line.strip():
            return
        record = parse_record(line)
        if record is None:
            if self._on_invalid:
                self._on_invalid(line)
            return
        self._callback(record)

    def _follow_moves(self):
        try:
            st = os.stat(self._path)
        except FileNotFoundError:
            return

        if st.st_ino != os.fstat(self._file.fileno()).st_ino:
            logger.info("File rotation detected for %s", self._path)
            for line in self._file.readlines():
                self._handle_line(line)
            self._file.close()
            self._file = open(self._path, "r", encoding="utf-8")
        elif self._file.tell() > st.st_size:
            logger.info("File truncation detected for %s", self._path)
            self._file.seek(0)
