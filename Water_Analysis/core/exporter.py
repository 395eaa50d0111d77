"""
CSV Exporter

Serialises a window to comma-separated text through a pandas DataFrame.
Fields are numbers or formatted dates, so nothing needs quoting.
"""

from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .chart_formatter import to_datetime
from .samples import Sample

CSV_HEADER = ["Timestamp", "Waktu", "Ketinggian (m)", "Laju Perubahan (m/s)"]
CSV_MIME = "text/csv"


# integral floats print without a trailing ".0"
_FLOAT_FORMAT = "%.15g"


def to_frame(window: Sequence[Sample], tz: Optional[tzinfo] = None) -> pd.DataFrame:
    """One row per sample, columns in CSV_HEADER order."""
    timestamp, waktu, height, rate = CSV_HEADER
    return pd.DataFrame({
        timestamp: pd.Series([s.timestamp for s in window], dtype="int64"),
        waktu: pd.Series([f"{to_datetime(s.timestamp, tz):%Y-%m-%d %H:%M:%S}" for s in window],
                         dtype=object),
        height: pd.Series([s.height for s in window], dtype=float),
        rate: pd.Series([s.rate for s in window], dtype=float),
    }, columns=CSV_HEADER)


def to_csv(window: Sequence[Sample], tz: Optional[tzinfo] = None) -> str:
    """Header line first; lines joined by "\\n" with no trailing newline."""
    text = to_frame(window, tz).to_csv(index=False, lineterminator="\n",
                                       float_format=_FLOAT_FORMAT)
    return text.rstrip("\n")


def to_csv_bytes(window: Sequence[Sample], tz: Optional[tzinfo] = None) -> bytes:
    """UTF-8 payload for st.download_button."""
    return to_csv(window, tz).encode("utf-8")


def export_filename(today: Optional[datetime] = None) -> str:
    today = today or datetime.now()
    return f"water-level-data-{today:%Y-%m-%d}.csv"


def recording_filename(timestamp_ms: int) -> str:
    return f"water-level-recording-{timestamp_ms}.csv"


def save_csv(window: Sequence[Sample], path: Path, tz: Optional[tzinfo] = None) -> Path:
    """Write the export to disk (CLI path)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv(window, tz), encoding="utf-8")
    return path
