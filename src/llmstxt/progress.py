from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from .logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    index: int
    total: int
    url: str
    message: str = "Processing"

    def __str__(self) -> str:
        return f"{self.message} [{self.index + 1}/{self.total}]: {self.url}"


ProgressListener = Callable[[ProgressEvent], None]


class ProgressChannel:
    """
    Broadcast channel for crawl progress. Workers publish from any thread;
    delivery to listeners is serialized so listeners never run concurrently.
    Nothing in the pipeline reads progress back.
    """

    def __init__(self) -> None:
        self._listeners: List[ProgressListener] = []
        self._lock = threading.Lock()
        self._last: Optional[ProgressEvent] = None

    def subscribe(self, listener: ProgressListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def publish(self, event: ProgressEvent) -> None:
        with self._lock:
            self._last = event
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception as e:  # noqa: BLE001
                    logger.warning(f"Progress listener failed: {e}")

    @property
    def last(self) -> Optional[ProgressEvent]:
        return self._last
