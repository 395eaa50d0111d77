"""Tests for gauge and forecast classification."""

import pytest

from Field_Reference.level_thresholds import (
    LEVEL_THRESHOLDS, get_level_status, get_prediction_status
)


@pytest.mark.parametrize("height, status", [
    (0.0, "safe"),
    (1.5, "safe"),
    (1.9, "warning"),
    (2.4, "warning"),
    (2.5, "danger"),
    (3.0, "danger"),
])
def test_level_status(height, status):
    got, percent, message = get_level_status(height)
    assert got == status
    assert percent == pytest.approx(height / 3.0 * 100)
    assert message == LEVEL_THRESHOLDS['gauge'].MESSAGES[status]


@pytest.mark.parametrize("value, status", [
    (2.4, "safe"),
    (2.41, "warning"),
    (2.7, "warning"),
    (2.71, "danger"),
])
def test_prediction_status(value, status):
    assert get_prediction_status(value) == status


def test_instrument_defaults():
    limits = LEVEL_THRESHOLDS['instrument']
    assert (limits.MIN_HEIGHT, limits.MAX_HEIGHT) == (0.0, 3.0)
    assert (limits.DEFAULT_HEIGHT, limits.DEFAULT_RATE) == (1.5, 0.001)
