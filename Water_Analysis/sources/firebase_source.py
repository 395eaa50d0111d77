"""
Firebase Source Module
firebase-admin wrapper for the Realtime Database holding the gauge data.

Paths:
    water_level          {height, rate} - pushed on every sensor update
    water_level_history  {<push id>: {timestamp, height, rate}, ...}
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import credentials, db
from firebase_admin import exceptions as firebase_exceptions
from google.auth import exceptions as google_auth_exceptions

from .base import FetchError, HistoryQuery, ReadingSource, SubscriptionCallback, Unsubscribe

logger = logging.getLogger(__name__)

_APP_NAME = "water-level-monitor"

# Missing or expired credentials surface as google-auth errors, not FirebaseError
_CLIENT_ERRORS = (firebase_exceptions.FirebaseError, google_auth_exceptions.GoogleAuthError, ValueError)


@dataclass(frozen=True)
class FirebaseSettings:
    """Connection settings, read from the environment."""
    database_url: str
    credentials_path: Optional[str] = None
    refresh_seconds: int = 30

    @classmethod
    def from_env(cls) -> Optional["FirebaseSettings"]:
        """
        Build settings from FIREBASE_DATABASE_URL / FIREBASE_CREDENTIALS.

        Returns:
            Settings, or None when no database URL is configured
        """
        url = os.getenv("FIREBASE_DATABASE_URL", "").strip()
        if not url:
            return None
        creds = os.getenv("FIREBASE_CREDENTIALS", "").strip() or None
        refresh = int(os.getenv("WATER_LEVEL_REFRESH_SECONDS", "30"))
        return cls(database_url=url, credentials_path=creds, refresh_seconds=refresh)


class FirebaseSource(ReadingSource):
    """Realtime Database reader - one app instance per process."""

    def __init__(self, settings: FirebaseSettings):
        self.settings = settings
        try:
            self._app = self._get_or_create_app(settings)
        except (_CLIENT_ERRORS + (OSError,)) as e:
            raise FetchError.from_exception(e) from e

    @staticmethod
    def _get_or_create_app(settings: FirebaseSettings):
        try:
            return firebase_admin.get_app(_APP_NAME)
        except ValueError:
            pass
        if settings.credentials_path:
            cred = credentials.Certificate(settings.credentials_path)
        else:
            cred = credentials.ApplicationDefault()
        return firebase_admin.initialize_app(
            cred, {'databaseURL': settings.database_url}, name=_APP_NAME
        )

    def fetch_once(self, query: HistoryQuery) -> List[Dict[str, Any]]:
        try:
            ref = db.reference(query.path, app=self._app)
            data = ref.order_by_child(query.order_by).limit_to_last(query.limit_to_last).get()
        except _CLIENT_ERRORS as e:
            raise FetchError.from_exception(e) from e

        if data is None:
            return []
        if isinstance(data, dict):
            entries = list(data.values())
        elif isinstance(data, list):
            entries = [entry for entry in data if entry is not None]
        else:
            raise FetchError(f"Unexpected payload at /{query.path}: {type(data).__name__}")
        return [entry for entry in entries if isinstance(entry, dict)]

    def subscribe(self, path: str, callback: SubscriptionCallback) -> Unsubscribe:
        current: Dict[str, Any] = {}
        lock = threading.Lock()

        def on_event(event):
            with lock:
                _apply_event(current, event.event_type, event.path, event.data)
                snapshot = dict(current)
            callback(snapshot)

        try:
            registration = db.reference(path, app=self._app).listen(on_event)
        except _CLIENT_ERRORS as e:
            raise FetchError.from_exception(e) from e
        logger.info("Subscribed to /%s", path)

        def unsubscribe():
            registration.close()
            logger.info("Unsubscribed from /%s", path)

        return unsubscribe


def _apply_event(current: Dict[str, Any], event_type: str, path: str, data: Any):
    """Fold a streaming `put`/`patch` event into the cached value."""
    key = path.strip("/")
    if event_type == "put":
        if not key:
            current.clear()
            if isinstance(data, dict):
                current.update(data)
        elif data is None:
            current.pop(key, None)
        else:
            current[key] = data
    elif event_type == "patch" and isinstance(data, dict):
        target = current.setdefault(key, {}) if key else current
        target.update(data)
