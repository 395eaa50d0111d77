"""Tests for the reading sources and live buffer."""

from unittest import mock

import pytest
from google.auth.exceptions import DefaultCredentialsError, RefreshError, TransportError

from Water_Analysis.core.samples import Granularity, LiveReading
from Water_Analysis.core.window_loader import WindowLoader
from Water_Analysis.sources import firebase_source
from Water_Analysis.sources.base import FetchError, HistoryQuery, LIVE_PATH, ReadingSource
from Water_Analysis.sources.firebase_source import FirebaseSettings, FirebaseSource, _apply_event
from Water_Analysis.sources.live_buffer import LiveReadingBuffer
from Water_Analysis.sources.memory_source import InMemorySource


class TestInMemorySource:

    def test_fetch_orders_and_limits(self):
        source = InMemorySource(history=[{'timestamp': t} for t in (5, 1, 3, 2, 4)])
        records = source.fetch_once(HistoryQuery(limit_to_last=2))
        assert [r['timestamp'] for r in records] == [4, 5]

    def test_fetch_failure(self):
        source = InMemorySource(fail_with=FetchError("offline"))
        with pytest.raises(FetchError, match="offline"):
            source.fetch_once(HistoryQuery())
        assert len(source.queries) == 1

    def test_subscribe_delivers_current_value_then_updates(self):
        source = InMemorySource(live={'height': 1.0, 'rate': 0.0})
        seen = []
        unsubscribe = source.subscribe(LIVE_PATH, seen.append)
        source.push(LIVE_PATH, {'height': 1.1, 'rate': 0.0001})
        assert seen == [{'height': 1.0, 'rate': 0.0}, {'height': 1.1, 'rate': 0.0001}]

        unsubscribe()
        source.push(LIVE_PATH, {'height': 1.2})
        assert len(seen) == 2
        assert source.subscriber_count(LIVE_PATH) == 0


class TestFetchError:

    @pytest.mark.parametrize("message, missing", [
        ('Index not defined, add ".indexOn": "timestamp"', True),
        ('Please add ".indexOn" rule', True),
        ("Permission denied", False),
    ])
    def test_missing_index_detection(self, message, missing):
        assert FetchError.from_exception(RuntimeError(message)).missing_index is missing


class TestLiveReadingBuffer:

    def test_tracks_latest_reading_and_version(self):
        source = InMemorySource(live={'height': 1.4, 'rate': 0.0005})
        buffer = LiveReadingBuffer(source)
        assert buffer.snapshot() == (0, LiveReading())

        buffer.start()
        assert buffer.active
        assert buffer.snapshot() == (1, LiveReading(height=1.4, rate=0.0005))

        source.push(LIVE_PATH, {'height': 1.5})
        version, reading = buffer.snapshot()
        assert version == 2
        assert reading == LiveReading(height=1.5, rate=None)

    def test_start_and_stop_are_idempotent(self):
        source = InMemorySource()
        buffer = LiveReadingBuffer(source)
        buffer.start()
        buffer.start()
        assert source.subscriber_count(LIVE_PATH) == 1
        buffer.stop()
        buffer.stop()
        assert not buffer.active
        assert source.subscriber_count(LIVE_PATH) == 0

    def test_non_numeric_payload_reads_as_unknown(self):
        source = InMemorySource(live={'height': "n/a", 'rate': True})
        buffer = LiveReadingBuffer(source)
        buffer.start()
        assert buffer.latest() == LiveReading()


class TestFirebaseSettings:

    def test_none_without_url(self, monkeypatch):
        monkeypatch.delenv("FIREBASE_DATABASE_URL", raising=False)
        assert FirebaseSettings.from_env() is None

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FIREBASE_DATABASE_URL", "https://gauge.firebaseio.com")
        monkeypatch.setenv("FIREBASE_CREDENTIALS", "/etc/gauge/key.json")
        monkeypatch.setenv("WATER_LEVEL_REFRESH_SECONDS", "10")
        settings = FirebaseSettings.from_env()
        assert settings.database_url == "https://gauge.firebaseio.com"
        assert settings.credentials_path == "/etc/gauge/key.json"
        assert settings.refresh_seconds == 10


@pytest.fixture
def mocked_firebase():
    with mock.patch.object(firebase_source, "firebase_admin") as admin, \
            mock.patch.object(firebase_source, "db") as db:
        yield admin, db


class TestFirebaseSource:

    def _source(self):
        return FirebaseSource(FirebaseSettings(database_url="https://gauge.firebaseio.com"))

    def test_reuses_existing_app(self, mocked_firebase):
        admin, _ = mocked_firebase
        self._source()
        admin.get_app.assert_called_once_with("water-level-monitor")
        admin.initialize_app.assert_not_called()

    def test_fetch_once_builds_ordered_limited_query(self, mocked_firebase):
        _, db = mocked_firebase
        ref = db.reference.return_value
        ref.order_by_child.return_value.limit_to_last.return_value.get.return_value = {
            '-a': {'timestamp': 2, 'height': 1.1},
            '-b': {'timestamp': 1, 'height': 1.0},
            '-c': "corrupt",
        }
        records = self._source().fetch_once(HistoryQuery(limit_to_last=168))

        assert db.reference.call_args[0][0] == "water_level_history"
        ref.order_by_child.assert_called_once_with("timestamp")
        ref.order_by_child.return_value.limit_to_last.assert_called_once_with(168)
        assert sorted(r['timestamp'] for r in records) == [1, 2]

    def test_fetch_once_empty_path(self, mocked_firebase):
        _, db = mocked_firebase
        db.reference.return_value.order_by_child.return_value.limit_to_last.return_value \
            .get.return_value = None
        assert self._source().fetch_once(HistoryQuery()) == []

    def test_fetch_errors_are_wrapped(self, mocked_firebase):
        _, db = mocked_firebase
        db.reference.return_value.order_by_child.side_effect = ValueError(
            'Index not defined, add ".indexOn": "timestamp"')
        with pytest.raises(FetchError) as info:
            self._source().fetch_once(HistoryQuery())
        assert info.value.missing_index

    def test_subscribe_folds_events_and_unsubscribes(self, mocked_firebase):
        _, db = mocked_firebase
        ref = db.reference.return_value
        seen = []
        unsubscribe = self._source().subscribe(LIVE_PATH, seen.append)

        on_event = ref.listen.call_args[0][0]
        on_event(mock.Mock(event_type="put", path="/", data={'height': 1.0, 'rate': 0.0}))
        on_event(mock.Mock(event_type="patch", path="/", data={'height': 1.2}))
        assert seen[-1] == {'height': 1.2, 'rate': 0.0}

        unsubscribe()
        ref.listen.return_value.close.assert_called_once()


class TestApplyEvent:

    def test_put_root_replaces(self):
        current = {'height': 1.0, 'stale': True}
        _apply_event(current, "put", "/", {'height': 2.0})
        assert current == {'height': 2.0}

    def test_put_child_sets_and_deletes(self):
        current = {'height': 1.0, 'rate': 0.1}
        _apply_event(current, "put", "/rate", 0.2)
        assert current['rate'] == 0.2
        _apply_event(current, "put", "/rate", None)
        assert current == {'height': 1.0}

    def test_put_root_none_clears(self):
        current = {'height': 1.0}
        _apply_event(current, "put", "/", None)
        assert current == {}


class TestCredentialFailures:

    @pytest.mark.parametrize("error", [
        DefaultCredentialsError("no ADC"),
        RefreshError("token expired"),
        TransportError("connection reset"),
    ])
    def test_fetch_wraps_auth_errors(self, mocked_firebase, error):
        _, db = mocked_firebase
        db.reference.side_effect = error
        source = FirebaseSource(FirebaseSettings(database_url="https://gauge.firebaseio.com"))
        with pytest.raises(FetchError):
            source.fetch_once(HistoryQuery())

    def test_loader_falls_back_on_expired_token(self, mocked_firebase, fixed_clock, rng):
        _, db = mocked_firebase
        db.reference.side_effect = RefreshError("token expired")
        source = FirebaseSource(FirebaseSettings(database_url="https://gauge.firebaseio.com"))
        result = WindowLoader(source, clock=fixed_clock, rng=rng).load(Granularity.DAILY)
        assert result.synthetic
        assert len(result.window) == 24
        assert "token expired" in result.error

    def test_subscribe_wraps_auth_errors(self, mocked_firebase):
        _, db = mocked_firebase
        db.reference.return_value.listen.side_effect = DefaultCredentialsError("no ADC")
        source = FirebaseSource(FirebaseSettings(database_url="https://gauge.firebaseio.com"))
        with pytest.raises(FetchError, match="no ADC"):
            source.subscribe(LIVE_PATH, lambda value: None)

    def test_app_creation_failure_wrapped(self, mocked_firebase):
        admin, _ = mocked_firebase
        admin.get_app.side_effect = ValueError("no app")
        admin.initialize_app.side_effect = DefaultCredentialsError("no ADC")
        with mock.patch.object(firebase_source, "credentials"):
            with pytest.raises(FetchError):
                FirebaseSource(FirebaseSettings(database_url="https://gauge.firebaseio.com"))

    def test_buffer_keeps_default_reading_when_subscribe_fails(self, mocked_firebase, caplog):
        _, db = mocked_firebase
        db.reference.return_value.listen.side_effect = RefreshError("token expired")
        source = FirebaseSource(FirebaseSettings(database_url="https://gauge.firebaseio.com"))
        buffer = LiveReadingBuffer(source)

        assert buffer.start() is False
        assert not buffer.active
        assert buffer.snapshot() == (0, LiveReading())
        assert "Live subscription to /water_level failed" in caplog.text

    def test_buffer_start_retries_after_failure(self):
        source = mock.Mock(spec=ReadingSource)
        source.subscribe.side_effect = [FetchError("offline"), mock.Mock()]
        buffer = LiveReadingBuffer(source)
        assert buffer.start() is False
        assert buffer.start() is True
        assert source.subscribe.call_count == 2
