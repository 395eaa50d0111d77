"""Height histogram over six fixed half-open 0.5 m ranges."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS
from .samples import Sample


@dataclass(frozen=True)
class DistributionBins:
    ranges: Tuple[Tuple[float, float], ...]
    counts: Tuple[int, ...]
    dropped: int = 0

    @property
    def labels(self) -> List[str]:
        return [f"{lo:g}-{hi:g}m" for lo, hi in self.ranges]


def _ranges() -> Tuple[Tuple[float, float], ...]:
    cfg = LEVEL_THRESHOLDS['distribution']
    return tuple((i * cfg.BIN_WIDTH, (i + 1) * cfg.BIN_WIDTH) for i in range(cfg.BIN_COUNT))


def bin_heights(window: Sequence[Sample]) -> DistributionBins:
    """
    Count samples per range; first matching range wins.

    Heights outside [0, 3) - including exactly 3.0 - fall in no bin and are
    only reported through `dropped`.
    """
    ranges = _ranges()
    counts = [0] * len(ranges)
    dropped = 0

    for sample in window:
        for i, (lo, hi) in enumerate(ranges):
            if lo <= sample.height < hi:
                counts[i] += 1
                break
        else:
            dropped += 1

    return DistributionBins(ranges=ranges, counts=tuple(counts), dropped=dropped)
