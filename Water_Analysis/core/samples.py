"""
Sample & Window Types

Immutable water level observations and the granularity selector that
decides how many of them make up one analysis window.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

HOUR_MS = 3600 * 1000


# -----------------------------------------------------------------------------
# Enums & Data Classes
# -----------------------------------------------------------------------------

class Granularity(Enum):
    """Time-range selector for the analysis tab."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def record_limit(self) -> int:
        """Number of most recent history records requested from the store."""
        return {Granularity.DAILY: 24, Granularity.WEEKLY: 168,
                Granularity.MONTHLY: 720}[self]

    @property
    def synthetic_profile(self) -> Tuple[int, int]:
        """(sample count, spacing in ms) used when no history is available."""
        return {Granularity.DAILY: (24, HOUR_MS),
                Granularity.WEEKLY: (28, 6 * HOUR_MS),
                Granularity.MONTHLY: (30, 24 * HOUR_MS)}[self]

    @property
    def label(self) -> str:
        return {Granularity.DAILY: "Harian", Granularity.WEEKLY: "Mingguan",
                Granularity.MONTHLY: "Bulanan"}[self]


class SeriesType(Enum):
    """Which sample field the analysis chart plots."""
    HEIGHT = "height"
    RATE = "rate"

    @property
    def label(self) -> str:
        return "Ketinggian" if self is SeriesType.HEIGHT else "Laju Perubahan"


@dataclass(frozen=True)
class Sample:
    """One (timestamp, height, rate) observation."""
    timestamp: int      # ms since epoch
    height: float       # metres
    rate: float         # metres / second


@dataclass(frozen=True)
class LiveReading:
    """Latest scalar reading pushed by the `water_level` subscription."""
    height: Optional[float] = None
    rate: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "LiveReading":
        if not isinstance(payload, dict):
            return cls()
        return cls(height=_as_float(payload.get('height')), rate=_as_float(payload.get('rate')))


Window = Tuple[Sample, ...]


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
