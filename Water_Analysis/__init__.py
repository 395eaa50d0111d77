"""
Water Analysis Module
Water level statistics, forecasting, and realtime database access.
"""

from .core.samples import Granularity, LiveReading, Sample, SeriesType
from .core.statistics import compute_statistics
from .core.window_loader import WindowLoader
from .core.recorder import ReadingRecorder
from .sources.base import FetchError, ReadingSource
from .sources.memory_source import InMemorySource

# Firebase client (import when needed)
# from .sources.firebase_source import FirebaseSource, FirebaseSettings
