"""Core analysis: window loading, statistics, binning, formatting, export."""
from .samples import Granularity, LiveReading, Sample, SeriesType
from .statistics import Alert, AlertLevel, Predictions, WaterStatistics, compute_statistics
from .distribution import DistributionBins, bin_heights
from .window_loader import WindowLoader, WindowResult, synthesize_window
from .chart_formatter import ChartSeries, format_series
from .recorder import ReadingRecorder
from .dashboard_state import DashboardState, reduce
