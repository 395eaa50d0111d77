"""
Statistics Engine Module

Summary statistics and linear forecasting over a window of samples.
Rate of change is the mean of the pairwise instantaneous rates (not the
end-to-end slope); predictions extrapolate it 1, 3 and 6 hours ahead from
the latest height.

Displayed values are rounded (heights 2 places, rate 4 places); alert
thresholds compare against the unrounded one-hour prediction.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Any, List, Sequence
from enum import Enum

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS
from .samples import Sample

HORIZONS_S = {'one_hour': 3600, 'three_hours': 3 * 3600, 'six_hours': 6 * 3600}


# -----------------------------------------------------------------------------
# Enums & Data Classes
# -----------------------------------------------------------------------------

class AlertLevel(Enum):
    """Forecast alert severity."""
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class Alert:
    level: AlertLevel
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'level': self.level.value, 'message': self.message}


@dataclass(frozen=True)
class Predictions:
    """Linear height forecasts (metres, rounded to 2 places)."""
    one_hour: float = 0.0
    three_hours: float = 0.0
    six_hours: float = 0.0

    def as_list(self) -> List[float]:
        return [self.one_hour, self.three_hours, self.six_hours]


@dataclass(frozen=True)
class WaterStatistics:
    """Window statistics as displayed on the analysis tab."""
    average: float = 0.0
    max: float = 0.0
    min: float = 0.0
    rate_of_change: float = 0.0
    standard_deviation: float = 0.0
    predictions: Predictions = field(default_factory=Predictions)
    alerts: List[Alert] = field(default_factory=list)
    sample_count: int = 0

    @property
    def has_danger(self) -> bool:
        return any(a.level is AlertLevel.DANGER for a in self.alerts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'average': self.average,
            'max': self.max,
            'min': self.min,
            'rate_of_change': self.rate_of_change,
            'standard_deviation': self.standard_deviation,
            'predictions': {
                'one_hour': self.predictions.one_hour,
                'three_hours': self.predictions.three_hours,
                'six_hours': self.predictions.six_hours,
            },
            'alerts': [a.to_dict() for a in self.alerts],
            'sample_count': self.sample_count,
        }


# -----------------------------------------------------------------------------
# Computation
# -----------------------------------------------------------------------------

def average_rate_of_change(window: Sequence[Sample]) -> float:
    """
    Mean of (h[i] - h[i-1]) / dt_seconds over consecutive pairs.

    Pairs with a non-positive time delta add nothing to the sum but still
    count toward the divisor (len - 1). Zero for fewer than two samples.
    """
    if len(window) < 2:
        return 0.0

    total = 0.0
    for prev, cur in zip(window, window[1:]):
        dt = (cur.timestamp - prev.timestamp) / 1000
        if dt > 0:
            total += (cur.height - prev.height) / dt
    return total / (len(window) - 1)


def check_alerts(one_hour_prediction: float) -> List[Alert]:
    """Warning and danger are evaluated independently; both may fire."""
    thresholds = LEVEL_THRESHOLDS['prediction']
    alerts = []
    if one_hour_prediction > thresholds.WARNING:
        alerts.append(Alert(AlertLevel.WARNING, thresholds.WARNING_MESSAGE))
    if one_hour_prediction > thresholds.DANGER:
        alerts.append(Alert(AlertLevel.DANGER, thresholds.DANGER_MESSAGE))
    return alerts


def compute_statistics(window: Sequence[Sample], current_height: float,
                       current_rate: float) -> WaterStatistics:
    """
    Reduce a window to statistics, predictions and alerts.

    Args:
        window: Samples ascending by timestamp (may be empty)
        current_height: Live height, used when the window is empty
        current_rate: Live rate, used when the window rate of change is 0

    Returns:
        WaterStatistics with display rounding applied
    """
    heights = np.array([s.height for s in window], dtype=float)

    if heights.size:
        avg = float(heights.mean())
        max_h, min_h = float(heights.max()), float(heights.min())
        std = float(heights.std())  # population (ddof=0)
        latest_height = float(heights[-1])
    else:
        avg = max_h = min_h = std = 0.0
        latest_height = current_height

    rate = average_rate_of_change(window)
    # a zero window rate (flat history, < 2 samples) defers to the live rate
    latest_rate = rate if rate != 0 else current_rate

    raw = {name: latest_height + latest_rate * seconds for name, seconds in HORIZONS_S.items()}

    return WaterStatistics(
        average=round(avg, 2),
        max=round(max_h, 2),
        min=round(min_h, 2),
        rate_of_change=round(rate, 4),
        standard_deviation=round(std, 2),
        predictions=Predictions(**{name: round(value, 2) for name, value in raw.items()}),
        alerts=check_alerts(raw['one_hour']),
        sample_count=len(window),
    )
