"""Text stream source (standard input, pipes, sockets wrapped as files)."""

from __future__ import annotations

import io
import sys
import threading
from collections.abc import Iterator
from typing import BinaryIO, TextIO

from lteconsole.sources.base import LineSource


class StreamLineSource(LineSource):
    """Reads a text stream until EOF.

    Reads block, so a stop request is only noticed between lines; the
    supervisor flushes on behalf of a reader that stays blocked.
    """

    def __init__(self, stream: TextIO, name: str = "stdin", close_stream: bool = False):
        super().__init__(name)
        self.stream = stream
        self.close_stream = close_stream
        self._wrapped = False

    @classmethod
    def from_binary(
        cls, stream: BinaryIO, name: str, encoding: str = "utf-8"
    ) -> StreamLineSource:
        """Read a byte stream; undecodable bytes become U+FFFD instead of failing the source."""
        text = io.TextIOWrapper(stream, encoding=encoding, errors="replace")
        source = cls(text, name=name)
        source._wrapped = True
        return source

    @classmethod
    def stdin(cls) -> StreamLineSource:
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is None:
            return cls(sys.stdin, name="stdin")
        return cls.from_binary(buffer, name="stdin")

    def close(self) -> None:
        if self.close_stream:
            if not self.stream.closed:
                self.stream.close()
        elif self._wrapped and not self.stream.closed:
            # Leave the underlying byte stream open for its owner
            self.stream.detach()  # type: ignore[attr-defined]
            self._wrapped = False

    def read_lines(self, stop: threading.Event) -> Iterator[str | None]:
        for line in iter(self.stream.readline, ""):
            if stop.is_set():
                return
            yield line.rstrip("\r\n")
