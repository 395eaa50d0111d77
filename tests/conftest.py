"""Shared fixtures."""

import numpy as np
import pytest

from Water_Analysis.core.samples import Sample
from Water_Analysis.sources.memory_source import InMemorySource

NOW_MS = 1_700_000_000_000
HOUR_MS = 3600 * 1000


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def fixed_clock():
    return lambda: NOW_MS / 1000


@pytest.fixture
def hourly_window():
    """Six hourly samples rising 0.05 m per hour."""
    return tuple(
        Sample(timestamp=NOW_MS - (5 - i) * HOUR_MS, height=1.0 + 0.05 * i, rate=0.05 / 3600)
        for i in range(6)
    )


@pytest.fixture
def history_records():
    """Store records deliberately out of timestamp order."""
    return [
        {'timestamp': NOW_MS - 1 * HOUR_MS, 'height': 1.2, 'rate': 0.0001},
        {'timestamp': NOW_MS - 3 * HOUR_MS, 'height': 1.0, 'rate': 0.0002},
        {'timestamp': NOW_MS - 2 * HOUR_MS, 'height': 1.1, 'rate': 0.0003},
    ]


@pytest.fixture
def memory_source(history_records):
    return InMemorySource(history=history_records, live={'height': 1.4, 'rate': 0.0005})
