"""Console line sources."""

from lteconsole.sources.base import LineSource
from lteconsole.sources.memory import ListLineSource, QueueLineSource
from lteconsole.sources.stream import StreamLineSource
from lteconsole.sources.tail import FileTailSource

__all__ = [
    "FileTailSource",
    "LineSource",
    "ListLineSource",
    "QueueLineSource",
    "StreamLineSource",
]
