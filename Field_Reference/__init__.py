"""Reference thresholds for the water level gauge."""
from .level_thresholds import LEVEL_THRESHOLDS, get_level_status, get_prediction_status
