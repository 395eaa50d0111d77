"""Tests for chart series formatting."""

from datetime import datetime, timezone

import pytest

from Water_Analysis.core.chart_formatter import format_label, format_series
from Water_Analysis.core.samples import Granularity, Sample, SeriesType
from Water_Analysis.core.statistics import Predictions

UTC = timezone.utc
# Wednesday 15 May 2024, 08:30 UTC
WED_MAY = int(datetime(2024, 5, 15, 8, 30, tzinfo=UTC).timestamp() * 1000)
HOUR_MS = 3600 * 1000


def _window(n=4):
    return tuple(Sample(timestamp=WED_MAY + i * HOUR_MS, height=1.0 + i / 10, rate=0.001 * i)
                 for i in range(n))


class TestLabels:

    def test_daily(self):
        assert format_label(WED_MAY, Granularity.DAILY, UTC) == "08:30"

    def test_weekly_uses_indonesian_day(self):
        assert format_label(WED_MAY, Granularity.WEEKLY, UTC) == "Rab, 08:30"

    def test_monthly_uses_indonesian_month(self):
        assert format_label(WED_MAY, Granularity.MONTHLY, UTC) == "15 Mei"
        august = int(datetime(2024, 8, 3, tzinfo=UTC).timestamp() * 1000)
        assert format_label(august, Granularity.MONTHLY, UTC) == "03 Agt"


class TestSeries:

    def test_daily_appends_null_padded_prediction(self):
        window = _window()
        predictions = Predictions(one_hour=1.5, three_hours=1.7, six_hours=2.0)
        series = format_series(window, Granularity.DAILY, SeriesType.HEIGHT, predictions, UTC)

        assert series.has_prediction
        assert series.history_length == 4
        assert len(series.labels) == len(series.values) == len(series.prediction) == 7
        assert series.prediction == [None, None, None, None, 1.5, 1.7, 2.0]
        assert series.values[:4] == pytest.approx([1.0, 1.1, 1.2, 1.3])
        assert series.values[4:] == [None, None, None]
        # last sample at 11:30 -> +1h, +3h, +6h
        assert series.labels[4:] == ["12:30", "14:30", "17:30"]

    @pytest.mark.parametrize("granularity", [Granularity.WEEKLY, Granularity.MONTHLY])
    def test_no_prediction_outside_daily_view(self, granularity):
        series = format_series(_window(), granularity, SeriesType.HEIGHT, Predictions(), UTC)
        assert not series.has_prediction
        assert len(series.labels) == len(series.values) == 4

    def test_rate_series(self):
        series = format_series(_window(), Granularity.DAILY, SeriesType.RATE, Predictions(), UTC)
        assert series.values == pytest.approx([0.0, 0.001, 0.002, 0.003])
        assert series.series_name == "Perubahan Ketinggian (m/s)"
        assert not series.has_prediction

    def test_empty_window(self):
        series = format_series((), Granularity.DAILY, SeriesType.HEIGHT, Predictions(), UTC)
        assert series.labels == []
        assert series.values == []
        assert not series.has_prediction
