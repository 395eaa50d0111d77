"""Realtime database access (Firebase + in-memory)."""
from .base import FetchError, HistoryQuery, ReadingSource, HISTORY_PATH, LIVE_PATH, INDEX_HINT
from .memory_source import InMemorySource
from .live_buffer import LiveReadingBuffer

# firebase-admin client (import when needed)
# from .firebase_source import FirebaseSource, FirebaseSettings
