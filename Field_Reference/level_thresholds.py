"""
Water Level Thresholds & Reference Values
Instrument limits and alert bands for the river gauge.

This module defines the thresholds used throughout the Water Level Monitor.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class InstrumentLimits:
    """
    Ultrasonic Gauge Limits

    The sensor reports height above the riverbed reference in metres.
    Readings outside [MIN_HEIGHT, MAX_HEIGHT] are physically impossible
    for the installed mast and are clamped when synthesised.
    """
    MIN_HEIGHT: float = 0.0
    MAX_HEIGHT: float = 3.0    # instrument's defined maximum

    # Live reading defaults when the subscription has not delivered yet
    DEFAULT_HEIGHT: float = 1.5
    DEFAULT_RATE: float = 0.001


@dataclass(frozen=True)
class PredictionThresholds:
    """
    Forecast Alert Thresholds (metres)

    Evaluated independently against the unrounded one-hour prediction,
    so both may fire at once.
    """
    WARNING: float = 2.4       # > 2.4 m = waspada
    DANGER: float = 2.7        # > 2.7 m = bahaya

    WARNING_MESSAGE: str = "Potensi ketinggian air mencapai level waspada dalam 1 jam"
    DANGER_MESSAGE: str = "Potensi ketinggian air mencapai level bahaya dalam 1 jam"


@dataclass(frozen=True)
class GaugeThresholds:
    """
    Gauge Colour Bands (percent of MAX_HEIGHT)

    Bands are exclusive at the lower edge: exactly 60% is still safe.
    """
    WARNING_PERCENT: float = 60.0   # 60-80% = waspada
    DANGER_PERCENT: float = 80.0    # > 80% = bahaya

    MESSAGES: Dict[str, str] = field(default_factory=lambda: {
        'safe': "Kondisi aman. Ketinggian air normal",
        'warning': "Waspada! Ketinggian air meningkat",
        'danger': "Peringatan! Ketinggian air mencapai level bahaya",
    })


@dataclass(frozen=True)
class DistributionRanges:
    """Histogram layout: six half-open 0.5 m bins from 0 to 3 m."""
    BIN_WIDTH: float = 0.5
    BIN_COUNT: int = 6


@dataclass(frozen=True)
class SettingsDefaults:
    """Initial values of the (unpersisted) settings tab."""
    REFRESH_INTERVAL_S: str = "30"
    REFRESH_OPTIONS: Tuple[str, ...] = ("5", "10", "30", "60")
    THEME: str = "light"
    THEME_OPTIONS: Tuple[str, ...] = ("light", "dark", "system")
    LOCATION: str = "Sungai Ciliwung, Jakarta"
    SAFE_PERCENT: int = 60
    WARNING_PERCENT: int = 80
    DANGER_PERCENT: int = 90
    PROFILE_NAME: str = "Admin Water Level"
    PROFILE_EMAIL: str = "admin@waterlevel.com"
    PROFILE_PHONE: str = "+6281234567890"


# Aggregate all thresholds
LEVEL_THRESHOLDS = {
    'instrument': InstrumentLimits(),
    'prediction': PredictionThresholds(),
    'gauge': GaugeThresholds(),
    'distribution': DistributionRanges(),
    'settings': SettingsDefaults(),
}


def get_level_status(height: float) -> Tuple[str, float, str]:
    """
    Classify a live height against the gauge bands.

    Args:
        height: Measured water height in metres

    Returns:
        Tuple of (status, percent_of_max, message)
    """
    limits = LEVEL_THRESHOLDS['instrument']
    gauge = LEVEL_THRESHOLDS['gauge']

    percent = height / limits.MAX_HEIGHT * 100

    if percent > gauge.DANGER_PERCENT:
        status = "danger"
    elif percent > gauge.WARNING_PERCENT:
        status = "warning"
    else:
        status = "safe"
    return status, percent, gauge.MESSAGES[status]


def get_prediction_status(predicted_height: float) -> str:
    """Classify a predicted height as 'safe', 'warning' or 'danger'."""
    thresholds = LEVEL_THRESHOLDS['prediction']

    if predicted_height > thresholds.DANGER:
        return "danger"
    elif predicted_height > thresholds.WARNING:
        return "warning"
    return "safe"
