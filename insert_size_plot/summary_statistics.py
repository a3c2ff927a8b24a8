from dataclasses import asdict, dataclass
from typing import Optional

import numpy as np

QUANTILES = (0.25, 0.5, 0.75)


@dataclass(frozen=True)
class InsertSizeSummary:
    """Read-only statistics over a finished histogram.

    ``total_count`` and ``mean`` cover every eligible sample, overflow
    included. The remaining statistics only see the in-range buckets.
    Statistics that are undefined for an empty histogram are None.
    """

    total_count: int
    mean: Optional[float]
    in_range_count: int
    in_range_mean: Optional[float]
    std: Optional[float]
    q1: Optional[int]
    median: Optional[int]
    q3: Optional[int]
    mode: Optional[int]
    overflow_count: int

    def to_dict(self):
        data = asdict(self)
        for key in ("mean", "in_range_mean", "std"):
            if data[key] is not None:
                data[key] = round(data[key], 2)
        return data


def _quantile_bucket(cumulative, in_range_count, fraction):
    # first bucket whose cumulative count exceeds floor(n * fraction)
    threshold = int(in_range_count * fraction)
    return int(np.searchsorted(cumulative, threshold, side="right"))


def summarize(histogram):
    counts = histogram.counts
    insert_sizes = np.arange(len(counts))
    in_range_count = int(counts.sum())
    total_count = in_range_count + histogram.overflow

    mean = None
    if total_count > 0:
        in_range_sum = int(np.dot(insert_sizes, counts))
        mean = (in_range_sum + histogram.overflow_sum) / total_count

    if in_range_count == 0:
        return InsertSizeSummary(
            total_count=total_count,
            mean=mean,
            in_range_count=0,
            in_range_mean=None,
            std=None,
            q1=None,
            median=None,
            q3=None,
            mode=None,
            overflow_count=histogram.overflow,
        )

    in_range_mean = float(np.average(insert_sizes, weights=counts))
    std = float(np.sqrt(np.average((insert_sizes - in_range_mean) ** 2, weights=counts)))

    cumulative = np.cumsum(counts)
    q1, median, q3 = (_quantile_bucket(cumulative, in_range_count, fraction) for fraction in QUANTILES)

    # np.argmax returns the first index on ties, so the smallest insert size wins
    mode = int(np.argmax(counts))

    return InsertSizeSummary(
        total_count=total_count,
        mean=float(mean),
        in_range_count=in_range_count,
        in_range_mean=in_range_mean,
        std=std,
        q1=q1,
        median=median,
        q3=q3,
        mode=mode,
        overflow_count=histogram.overflow,
    )
