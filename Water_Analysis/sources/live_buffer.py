"""Lock-protected holder for the latest `water_level` push."""

import logging
import threading
from typing import Any, Dict, Optional, Tuple

from Water_Analysis.core.samples import LiveReading
from .base import FetchError, LIVE_PATH, ReadingSource, Unsubscribe

logger = logging.getLogger(__name__)


class LiveReadingBuffer:
    """
    Subscribes once and keeps the newest reading.

    Subscription callbacks arrive on the store client's thread; the UI
    thread reads `snapshot()` on each rerun and compares `version` to see
    whether anything changed since the last look.
    """

    def __init__(self, source: ReadingSource, path: str = LIVE_PATH):
        self.source = source
        self.path = path
        self._reading = LiveReading()
        self._version = 0
        self._lock = threading.Lock()
        self._unsubscribe: Optional[Unsubscribe] = None

    def start(self) -> bool:
        """Open the subscription. On failure the default reading stays in place."""
        if self._unsubscribe is None:
            try:
                self._unsubscribe = self.source.subscribe(self.path, self._on_value)
            except FetchError as e:
                logger.error("Live subscription to /%s failed: %s", self.path, e)
        return self.active

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def _on_value(self, value: Dict[str, Any]):
        reading = LiveReading.from_payload(value)
        with self._lock:
            self._reading = reading
            self._version += 1

    def snapshot(self) -> Tuple[int, LiveReading]:
        with self._lock:
            return self._version, self._reading

    def latest(self) -> LiveReading:
        return self.snapshot()[1]
