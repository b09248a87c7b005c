"""File source with optional follow mode.

Reads a log file from the start or from its current end. In follow mode it
keeps polling for appended content like ``tail -F``: a truncated or replaced
file is reopened from its beginning, and a trailing partial line is held
back until its newline arrives or the source is stopped.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from lteconsole.core.exceptions import SourceUnavailableError
from lteconsole.core.logging import get_logger
from lteconsole.sources.base import LineSource

logger = get_logger(__name__)


class FileTailSource(LineSource):
    """Reads lines from a (possibly growing) file."""

    def __init__(
        self,
        path: Path,
        from_start: bool = True,
        follow: bool = False,
        poll_interval: float = 0.5,
        encoding: str = "utf-8",
    ):
        super().__init__(str(path))
        self.path = Path(path)
        self.from_start = from_start
        self.follow = follow
        self.poll_interval = poll_interval
        self.encoding = encoding
        self._file: BinaryIO | None = None

    def open(self) -> None:
        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise SourceUnavailableError(str(self.path), e.strerror or str(e)) from e
        if not self.from_start:
            self._file.seek(0, os.SEEK_END)
        logger.debug("file_source_opened", path=str(self.path), position=self._file.tell())

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self.encoding, errors="replace").rstrip("\r\n")

    def _replaced_or_truncated(self) -> bool:
        assert self._file is not None
        try:
            on_disk = os.stat(self.path)
        except FileNotFoundError:
            # Rotated away and not recreated yet
            return False
        current = os.fstat(self._file.fileno())
        if on_disk.st_ino != current.st_ino or on_disk.st_dev != current.st_dev:
            return True
        return on_disk.st_size < self._file.tell()

    def _reopen(self) -> None:
        self.close()
        self._file = open(self.path, "rb")
        logger.info("file_source_reopened", path=str(self.path))

    def read_lines(self, stop: threading.Event) -> Iterator[str | None]:
        if self._file is None:
            self.open()
        pending = b""

        while not stop.is_set():
            assert self._file is not None
            chunk = self._file.readline()
            if chunk:
                pending += chunk
                if pending.endswith(b"\n"):
                    yield self._decode(pending)
                    pending = b""
                continue

            if not self.follow:
                break

            if self._replaced_or_truncated():
                if pending:
                    logger.debug("partial_line_discarded", path=str(self.path))
                pending = b""
                self._reopen()
                continue

            yield None
            stop.wait(self.poll_interval)

        # End of file, or a stop request while a followed line is incomplete
        if pending:
            yield self._decode(pending)
