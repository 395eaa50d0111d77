"""
Reading Source Interface

Store-agnostic access to the hosted realtime database. The analysis core
only ever talks to a ReadingSource, so it can run against Firebase in
the dashboard and against an in-memory source in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

LIVE_PATH = "water_level"
HISTORY_PATH = "water_level_history"

INDEX_HINT = ('Tambahkan ".indexOn": "timestamp" pada Firebase Database Rules '
              'untuk path "/water_level_history"')


class FetchError(Exception):
    """A one-shot read from the store failed."""

    def __init__(self, message: str, missing_index: bool = False):
        super().__init__(message)
        self.missing_index = missing_index

    @classmethod
    def from_exception(cls, exc: Exception) -> "FetchError":
        text = str(exc)
        missing_index = "indexOn" in text or "Index not defined" in text
        return cls(text, missing_index=missing_index)


@dataclass(frozen=True)
class HistoryQuery:
    """Ordered, bounded read: order by `order_by` child, keep the last `limit_to_last`."""
    path: str = HISTORY_PATH
    order_by: str = "timestamp"
    limit_to_last: int = 24


Unsubscribe = Callable[[], None]
SubscriptionCallback = Callable[[Dict[str, Any]], None]


class ReadingSource(ABC):
    """Push subscription + one-shot query over a realtime key-value store."""

    @abstractmethod
    def subscribe(self, path: str, callback: SubscriptionCallback) -> Unsubscribe:
        """
        Deliver the value at `path` to `callback` on every change.

        Callbacks receive the full current value (a dict). Returns a
        callable that cancels the subscription.

        Raises:
            FetchError: when the subscription cannot be opened
        """

    @abstractmethod
    def fetch_once(self, query: HistoryQuery) -> List[Dict[str, Any]]:
        """
        Run an ordered, bounded read.

        Returns:
            Raw records (unordered; callers sort). Empty list when the path
            holds no data.

        Raises:
            FetchError: on network, permission or missing-index failures
        """
