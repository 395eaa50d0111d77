"""
Reading Recorder Module

Polls the live reading on a fixed interval and accumulates samples until
stopped. The poll thread must be stopped explicitly (Stop button or
session teardown); stop() is idempotent.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from .samples import LiveReading, Sample

logger = logging.getLogger(__name__)


class ReadingRecorder:
    """Background poller turning live readings into timestamped samples. 5s by default."""
    DEFAULT_INTERVAL_S = 5.0

    def __init__(self, poll: Callable[[], Optional[LiveReading]],
                 interval_s: float = DEFAULT_INTERVAL_S,
                 clock: Callable[[], float] = time.time):
        self.poll = poll
        self.interval_s = interval_s
        self.clock = clock
        self._samples: List[Sample] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.started_at: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def samples(self) -> List[Sample]:
        with self._lock:
            return list(self._samples)

    def start(self):
        """Start polling. No-op when already running."""
        if self.is_running:
            return
        self._stop_event.clear()
        with self._lock:
            self._samples = []
        self.started_at = int(self.clock() * 1000)
        self._thread = threading.Thread(target=self._run, name="reading-recorder", daemon=True)
        self._thread.start()
        logger.info("Recording started (every %.1fs)", self.interval_s)

    def stop(self) -> List[Sample]:
        """Cancel the poll and return everything recorded."""
        thread = self._thread
        if thread is not None:
            self._stop_event.set()
            thread.join(timeout=self.interval_s + 1.0)
            self._thread = None
            logger.info("Recording stopped with %d sample(s)", len(self._samples))
        return self.samples

    def record_once(self) -> Optional[Sample]:
        """Take one reading now; skipped while the live height is unknown."""
        reading = self.poll()
        if reading is None or reading.height is None:
            return None
        sample = Sample(timestamp=int(self.clock() * 1000), height=reading.height,
                        rate=reading.rate if reading.rate is not None else 0.0)
        with self._lock:
            self._samples.append(sample)
        return sample

    def _run(self):
        while not self._stop_event.is_set():
            self.record_once()
            if self._stop_event.wait(self.interval_s):
                break
