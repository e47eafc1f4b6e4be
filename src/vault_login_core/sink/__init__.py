"""Token sinks and the sink-write task."""

from .base import Sink
from .factory import UnknownSinkTypeError, create_sink, create_sinks
from .file import FileSink
from .server import SinkServer

__all__ = [
    "FileSink",
    "Sink",
    "SinkServer",
    "UnknownSinkTypeError",
    "create_sink",
    "create_sinks",
]
