"""In-memory ReadingSource for offline runs and tests."""

import threading
from typing import Any, Dict, List, Optional

from .base import FetchError, HistoryQuery, ReadingSource, SubscriptionCallback, Unsubscribe


class InMemorySource(ReadingSource):
    """Dict-backed store. `fail_with` makes every fetch raise."""

    def __init__(self, history: Optional[List[Dict[str, Any]]] = None,
                 live: Optional[Dict[str, Any]] = None,
                 fail_with: Optional[FetchError] = None):
        self.history: List[Dict[str, Any]] = list(history or [])
        self.fail_with = fail_with
        self.queries: List[HistoryQuery] = []
        self._values: Dict[str, Dict[str, Any]] = {}
        self._subscribers: Dict[str, List[SubscriptionCallback]] = {}
        self._lock = threading.Lock()
        if live is not None:
            self._values["water_level"] = dict(live)

    def fetch_once(self, query: HistoryQuery) -> List[Dict[str, Any]]:
        self.queries.append(query)
        if self.fail_with is not None:
            raise self.fail_with
        ordered = sorted(self.history, key=lambda r: r.get(query.order_by, 0))
        return [dict(r) for r in ordered[-query.limit_to_last:]] if query.limit_to_last > 0 else []

    def subscribe(self, path: str, callback: SubscriptionCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.setdefault(path, []).append(callback)
            value = self._values.get(path)
        if value is not None:
            callback(dict(value))

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers.get(path, []):
                    self._subscribers[path].remove(callback)

        return unsubscribe

    def push(self, path: str, value: Dict[str, Any]):
        """Set `path` and notify its subscribers, like a sensor write would."""
        with self._lock:
            self._values[path] = dict(value)
            callbacks = list(self._subscribers.get(path, []))
        for callback in callbacks:
            callback(dict(value))

    def subscriber_count(self, path: str) -> int:
        with self._lock:
            return len(self._subscribers.get(path, []))
