#!/usr/bin/env python3
"""
Water Level Monitor - Standalone Report
Run this to check the analysis without Streamlit.

Usage: python report_cli.py --range weekly --export out/

Without --database-url (or FIREBASE_DATABASE_URL) the report runs on
synthetic sample data.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS
from Water_Analysis.core.distribution import bin_heights
from Water_Analysis.core.exporter import export_filename, save_csv
from Water_Analysis.core.samples import Granularity
from Water_Analysis.core.statistics import compute_statistics
from Water_Analysis.core.window_loader import WindowLoader, WindowResult
from Water_Analysis.sources.base import ReadingSource
from Water_Analysis.sources.firebase_source import FirebaseSettings, FirebaseSource
from Water_Analysis.sources.memory_source import InMemorySource


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Water Level Monitor report")
    parser.add_argument("--range", "-r", default="daily", choices=[g.value for g in Granularity],
                        help="Time range")
    parser.add_argument("--database-url", default=None, help="Firebase Realtime Database URL")
    parser.add_argument("--credentials", default=None, help="Service-account JSON path")
    parser.add_argument("--height", type=float, default=None, help="Current height (m) for fallbacks")
    parser.add_argument("--rate", type=float, default=None, help="Current rate (m/s) for fallbacks")
    parser.add_argument("--export", "-e", type=Path, default=None, help="Directory for the CSV export")
    parser.add_argument("--seed", type=int, default=None, help="Seed for synthetic data")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show library logging")
    return parser.parse_args(argv)


def build_source(args) -> ReadingSource:
    if args.database_url:
        return FirebaseSource(FirebaseSettings(args.database_url, args.credentials))
    settings = FirebaseSettings.from_env()
    if settings is not None:
        return FirebaseSource(settings)
    return InMemorySource()


def print_report(result: WindowResult, height: Optional[float], rate: Optional[float]):
    limits = LEVEL_THRESHOLDS["instrument"]
    stats = compute_statistics(
        result.window,
        height if height is not None else limits.DEFAULT_HEIGHT,
        rate if rate is not None else limits.DEFAULT_RATE,
    )

    print(f"\n📊 {result.granularity.label}: {stats.sample_count} samples"
          + (" (sample data)" if result.synthetic else ""))
    if result.error:
        print(f"   ⚠️  {result.error}")
        if result.hint:
            print(f"   {result.hint}")

    print(f"   Rata-rata        : {stats.average} m")
    print(f"   Maksimum         : {stats.max} m")
    print(f"   Minimum          : {stats.min} m")
    print(f"   Laju Perubahan   : {stats.rate_of_change} m/s")
    print(f"   Standar Deviasi  : {stats.standard_deviation} m")

    p = stats.predictions
    print(f"\n🔮 Prediksi: 1 jam {p.one_hour} m | 3 jam {p.three_hours} m | 6 jam {p.six_hours} m")

    bins = bin_heights(result.window)
    print("\n📈 Distribusi:")
    for label, count in zip(bins.labels, bins.counts):
        print(f"   {label:>8} {'█' * count} {count}")
    if bins.dropped:
        print(f"   ({bins.dropped} outside 0-3m)")

    if stats.alerts:
        print()
        for alert in stats.alerts:
            icon = "🚨" if alert.level.value == "danger" else "⚠️ "
            print(f"{icon} {alert.message}")
    else:
        print("\n✅ Tidak ada peringatan")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.ERROR)

    print("\n" + "=" * 50)
    print("  Water Level Monitor - Report")
    print("=" * 50)

    source = build_source(args)
    rng = np.random.default_rng(args.seed)
    loader = WindowLoader(source, rng=rng)
    result = loader.load(Granularity(args.range), args.height, args.rate)

    print_report(result, args.height, args.rate)

    if args.export is not None:
        path = save_csv(result.window, args.export / export_filename())
        print(f"\n✅ Saved {len(result.window)} rows to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
