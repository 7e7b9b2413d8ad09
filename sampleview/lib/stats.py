"""Descriptive statistics over per-window metric values.

Functions:
    - compute_stats: min/max/mean/population std of a numeric sequence.
    - format_stat: Render a statistic for display, using "N/A" for missing values.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np


@dataclass(frozen=True)
class MetricStats:
    """Summary of a numeric sequence. All fields are None for an empty sequence."""

    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    std: Optional[float] = None

    @property
    def is_empty(self):
        return self.mean is None


EMPTY_STATS = MetricStats()


def compute_stats(values: Iterable[float]) -> MetricStats:
    """Compute min, max, mean and population standard deviation.

    Args:
        values: Numeric values. Missing values must already be removed by the caller.

    Returns:
        MetricStats with plain float fields, or EMPTY_STATS if `values` is empty.
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return EMPTY_STATS

    # ddof=0: population standard deviation
    return MetricStats(
        min=float(arr.min()),
        max=float(arr.max()),
        mean=float(arr.mean()),
        std=float(arr.std(ddof=0)),
    )


def format_stat(value, decimals=2):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "N/A"
    return f"{value:.{decimals}f}"
