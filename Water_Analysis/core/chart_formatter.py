"""
Chart Formatter Module

Maps a window (plus predictions) into index-aligned label/value series
for the Plotly charts. Labels use Indonesian day and month abbreviations.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

from .samples import Granularity, Sample, SeriesType, HOUR_MS
from .statistics import Predictions

DAY_NAMES_ID = ["Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min"]   # Monday first
MONTH_NAMES_ID = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
                  "Jul", "Agt", "Sep", "Okt", "Nov", "Des"]

PREDICTION_OFFSETS_MS = (HOUR_MS, 3 * HOUR_MS, 6 * HOUR_MS)


@dataclass(frozen=True)
class ChartSeries:
    """Labels and every series share one length."""
    labels: List[str]
    values: List[Optional[float]]
    series_name: str
    prediction: Optional[List[Optional[float]]] = None
    history_length: int = 0

    @property
    def has_prediction(self) -> bool:
        return self.prediction is not None


def to_datetime(timestamp_ms: int, tz: Optional[tzinfo] = None) -> datetime:
    if tz is None:
        return datetime.fromtimestamp(timestamp_ms / 1000)
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)


def format_label(timestamp_ms: int, granularity: Granularity,
                 tz: Optional[tzinfo] = None) -> str:
    """HH:MM (daily), 'Sen, HH:MM' (weekly) or 'DD Mei' (monthly)."""
    dt = to_datetime(timestamp_ms, tz)
    if granularity is Granularity.WEEKLY:
        return f"{DAY_NAMES_ID[dt.weekday()]}, {dt:%H:%M}"
    if granularity is Granularity.MONTHLY:
        return f"{dt:%d} {MONTH_NAMES_ID[dt.month - 1]}"
    return f"{dt:%H:%M}"


def series_label(series: SeriesType) -> str:
    return "Ketinggian Air (m)" if series is SeriesType.HEIGHT else "Perubahan Ketinggian (m/s)"


def format_series(window: Sequence[Sample], granularity: Granularity,
                  series: SeriesType = SeriesType.HEIGHT,
                  predictions: Optional[Predictions] = None,
                  tz: Optional[tzinfo] = None) -> ChartSeries:
    """
    Build chart series for a window.

    In the daily view with predictions available, three forecast points
    (+1 h, +3 h, +6 h after the last sample) are appended: the prediction
    series is null-padded over the history and the history series is
    null-padded over the forecast slots.
    """
    labels = [format_label(s.timestamp, granularity, tz) for s in window]
    values: List[Optional[float]] = [
        s.rate if series is SeriesType.RATE else s.height for s in window
    ]
    n = len(window)

    # forecasts are heights; they are not overlaid on the rate series
    if (granularity is not Granularity.DAILY or series is not SeriesType.HEIGHT
            or predictions is None or n == 0):
        return ChartSeries(labels=labels, values=values, series_name=series_label(series),
                           history_length=n)

    last = window[-1].timestamp
    labels = labels + [format_label(last + offset, Granularity.DAILY, tz)
                       for offset in PREDICTION_OFFSETS_MS]
    prediction = [None] * n + predictions.as_list()
    values = values + [None] * len(PREDICTION_OFFSETS_MS)

    return ChartSeries(labels=labels, values=values, series_name=series_label(series),
                       prediction=prediction, history_length=n)
