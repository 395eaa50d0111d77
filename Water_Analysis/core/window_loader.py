"""
Window Loader Module

Fetches the most recent history records for a granularity and turns them
into an ascending window. When the store has no history, or the read
fails, a synthetic window is generated around the live reading instead -
loading never raises to the caller.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS
from Water_Analysis.sources.base import FetchError, HistoryQuery, ReadingSource, INDEX_HINT
from .samples import Granularity, Sample, Window

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class WindowResult:
    """A loaded window plus how it was obtained."""
    window: Window
    granularity: Granularity
    synthetic: bool = False
    error: Optional[str] = None
    missing_index: bool = False
    rejected: Dict[str, int] = field(default_factory=dict)

    @property
    def hint(self) -> Optional[str]:
        return INDEX_HINT if self.missing_index else None


# -----------------------------------------------------------------------------
# Record parsing
# -----------------------------------------------------------------------------

def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not np.isfinite(value):
        return None
    return float(value)


def parse_record(record: Any) -> Tuple[Optional[Sample], Optional[str]]:
    """
    Validate a single history record.

    Missing or non-numeric height/rate read as 0.0; a record without a
    usable timestamp cannot be placed in time and is rejected.

    Returns:
        Tuple of (sample, rejection_reason)
    """
    if not isinstance(record, dict):
        return None, "not_an_object"

    timestamp = _number(record.get('timestamp'))
    if timestamp is None:
        return None, "missing_timestamp"

    height = _number(record.get('height')) or 0.0
    rate = _number(record.get('rate')) or 0.0
    return Sample(timestamp=int(timestamp), height=height, rate=rate), None


def parse_records(records: List[Any]) -> Tuple[Window, Dict[str, int]]:
    """Parse and sort records ascending by timestamp; count rejections by reason."""
    samples = []
    rejected: Dict[str, int] = defaultdict(int)

    for record in records:
        sample, reason = parse_record(record)
        if sample is None:
            rejected[reason] += 1
        else:
            samples.append(sample)

    if rejected:
        logger.info("Rejected %d history record(s): %s", sum(rejected.values()), dict(rejected))

    samples.sort(key=lambda s: s.timestamp)
    return tuple(samples), dict(rejected)


# -----------------------------------------------------------------------------
# Synthetic fallback
# -----------------------------------------------------------------------------

def synthesize_window(granularity: Granularity, current_height: Optional[float] = None,
                      current_rate: Optional[float] = None, now_ms: Optional[int] = None,
                      rng: Optional[np.random.Generator] = None) -> Window:
    """
    Generate an evenly spaced window ending at `now_ms`.

    Args:
        granularity: Selects sample count and spacing
        current_height: Live height (defaults to 1.5 m when unavailable)
        current_rate: Live rate (defaults to 0.001 m/s when unavailable)
        now_ms: Timestamp of the last sample; wall clock if omitted
        rng: Random generator, for reproducible runs

    Returns:
        Window of synthetic samples, heights clamped to [0, 3]
    """
    limits = LEVEL_THRESHOLDS['instrument']
    height = limits.DEFAULT_HEIGHT if current_height is None else current_height
    rate = limits.DEFAULT_RATE if current_rate is None else current_rate
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    rng = rng if rng is not None else np.random.default_rng()

    count, interval = granularity.synthetic_profile
    height_noise = rng.uniform(-0.1, 0.1, size=count)
    rate_noise = rng.uniform(-0.001, 0.001, size=count)
    heights = np.clip(height + height_noise, limits.MIN_HEIGHT, limits.MAX_HEIGHT)

    return tuple(
        Sample(timestamp=now_ms - (count - 1 - i) * interval,
               height=float(heights[i]),
               rate=float(rate + rate_noise[i]))
        for i in range(count)
    )


# -----------------------------------------------------------------------------
# Loader
# -----------------------------------------------------------------------------

class WindowLoader:
    """Loads analysis windows from a ReadingSource, falling back to synthetic data."""

    def __init__(self, source: ReadingSource, clock: Callable[[], float] = time.time,
                 rng: Optional[np.random.Generator] = None):
        self.source = source
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng()

    def load(self, granularity: Granularity, current_height: Optional[float] = None,
             current_rate: Optional[float] = None) -> WindowResult:
        """Fetch the latest `granularity.record_limit` samples; never raises."""
        query = HistoryQuery(limit_to_last=granularity.record_limit)

        try:
            records = self.source.fetch_once(query)
        except FetchError as e:
            logger.warning("History fetch failed (%s), using sample data: %s",
                           granularity.value, e)
            return WindowResult(
                window=self._synthesize(granularity, current_height, current_rate),
                granularity=granularity,
                synthetic=True,
                error=f"Failed to load analytics data: {e}",
                missing_index=e.missing_index,
            )

        window, rejected = parse_records(records)
        window = window[-granularity.record_limit:]
        if not window:
            logger.info("No history at /%s, using sample data", query.path)
            return WindowResult(
                window=self._synthesize(granularity, current_height, current_rate),
                granularity=granularity,
                synthetic=True,
                rejected=rejected,
            )

        return WindowResult(window=window, granularity=granularity, rejected=rejected)

    def _synthesize(self, granularity, current_height, current_rate) -> Window:
        return synthesize_window(granularity, current_height, current_rate,
                                 now_ms=int(self.clock() * 1000), rng=self.rng)
