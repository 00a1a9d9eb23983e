"""
Event Sink
==========

Append-only, timestamped operator log mirrored to the console.

Every event is exactly one line:

    [YYYY-MM-DD HH:MM:SS] message

The sink owns a private ``logging.Logger`` (not registered with the
logging manager) with a FileHandler for the log file and a
StreamHandler for the console. It is passed to the components that
emit events instead of living in process-wide state. Timestamps come
from the injected Clock so tests can control them.

Writes are serialized by a lock so that lines from the loop thread and
the stopping thread are never interleaved and appear in the same order
in both outputs.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional, TextIO, Union

from aquatic_monitor.core.clock import Clock, SystemClock
from aquatic_monitor.errors import EventSinkError


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class EventSink:
    """
    Operator-facing event log.

    Attributes:
        path: Log file path
        lines_written: Number of events emitted

    Example:
        with EventSink("aquatic_monitor_log.txt") as sink:
            sink.emit("System initialized")
    """

    def __init__(
        self,
        path: Union[str, Path],
        console: Optional[TextIO] = sys.stdout,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Open the event log.

        Args:
            path: File to append events to (created if missing)
            console: Stream to mirror events to, or None to disable
            clock: Time source for event timestamps

        Raises:
            EventSinkError: If the log file cannot be opened
        """
        self.path = Path(path)
        self._clock = clock or SystemClock()
        self._lock = threading.Lock()
        self._closed = False
        self.lines_written: int = 0

        self._logger = logging.Logger(f"aquatic_monitor.events[{self.path}]", logging.INFO)
        self._logger.propagate = False
        formatter = logging.Formatter("%(message)s")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        except OSError as e:
            raise EventSinkError(f"Failed to open log file {self.path}: {e}") from e

        file_handler.setFormatter(formatter)
        self._handlers: List[logging.Handler] = [file_handler]

        if console is not None:
            console_handler = logging.StreamHandler(console)
            console_handler.setFormatter(formatter)
            self._handlers.append(console_handler)

        for handler in self._handlers:
            self._logger.addHandler(handler)

    @staticmethod
    def format_line(timestamp, message: str) -> str:
        """Render one event line; embedded newlines become ' | '."""
        flat = " | ".join(part for part in str(message).splitlines() if part.strip())
        return f"[{timestamp.strftime(TIMESTAMP_FORMAT)}] {flat}"

    def emit(self, message: str) -> str:
        """
        Append one event.

        Returns:
            The line as written

        Raises:
            EventSinkError: If the sink has been closed
        """
        with self._lock:
            if self._closed:
                raise EventSinkError(f"Event sink {self.path} is closed")
            line = self.format_line(self._clock.now(), message)
            self._logger.info(line)
            self.lines_written += 1
            return line

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for handler in self._handlers:
                handler.flush()
                self._logger.removeHandler(handler)
                # Never close the caller's console stream
                if isinstance(handler, logging.FileHandler):
                    handler.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "EventSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
