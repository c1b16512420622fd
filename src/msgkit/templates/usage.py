"""
Helper usage tracking.

When enabled, every helper call made during rendering is reported to a
background consumer that logs it as a JSON line at WARNING. The hand-off
queue holds a single event, so a rendering call blocks until the previous
event was picked up.
"""

from __future__ import annotations

import json
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from msgkit.logger.core import Logger


@dataclass
class UsageEvent:
    function: str
    args: tuple
    output: Any = None
    error: Optional[str] = None
    time: datetime = field(default_factory=lambda: datetime.now().astimezone())

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "function": self.function,
            "args": list(self.args),
            "output": self.output,
            "error": self.error,
        }


class UsageTracker:
    """
    Single-slot producer/consumer for helper calls.

    Usage:
        tracker = UsageTracker()
        tracker.start(log)
        renderer = TemplateRenderer(tracker=tracker)
        renderer.render(...)
        tracker.drain()
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[Optional[UsageEvent]] = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None
        self._logger: Optional[Logger] = None
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._thread is not None

    def start(self, logger: Optional[Logger] = None) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._logger = logger or Logger.default()
            self._thread = threading.Thread(
                target=self._consume, name="msgkit-usage", daemon=True
            )
            self._thread.start()

    def track(self, function: str, output: Any, error: Optional[BaseException], *args: Any) -> None:
        """Report one helper call. No-op until started."""
        if self._thread is None:
            return
        self._queue.put(UsageEvent(
            function=function,
            args=args,
            output=output,
            error=None if error is None else str(error),
        ))

    def drain(self) -> None:
        """Block until every reported event has been logged."""
        if self._thread is not None:
            self._queue.join()

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(None)
            thread.join()
            self._thread = None

    def _consume(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                self._logger.warning(json.dumps(event.to_dict(), default=str))
            finally:
                self._queue.task_done()
