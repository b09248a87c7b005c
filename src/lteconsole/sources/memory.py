"""In-memory line sources for programmatic use and tests."""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterable, Iterator

from lteconsole.sources.base import LineSource

_END = object()


class ListLineSource(LineSource):
    """Yields a fixed sequence of lines, then ends."""

    def __init__(self, lines: Iterable[str], name: str = "memory"):
        super().__init__(name)
        self.lines = list(lines)

    def read_lines(self, stop: threading.Event) -> Iterator[str | None]:
        for line in self.lines:
            if stop.is_set():
                return
            yield line


class QueueLineSource(LineSource):
    """Live source fed from another thread with put(); end() closes the stream."""

    def __init__(self, name: str = "queue", poll_interval: float = 0.05):
        super().__init__(name)
        self.poll_interval = poll_interval
        self._queue: queue.Queue[object] = queue.Queue()

    def put(self, *lines: str) -> None:
        for line in lines:
            self._queue.put(line)

    def end(self) -> None:
        self._queue.put(_END)

    def read_lines(self, stop: threading.Event) -> Iterator[str | None]:
        while not stop.is_set():
            try:
                item = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                yield None
                continue
            if item is _END:
                return
            assert isinstance(item, str)
            yield item
