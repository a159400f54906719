"""
Uniform Intensity Aggregator

The uniform intensity U is the annual rate of change the whole time series
would show if its change were spread evenly over all years. It is the
reference line interval intensities are compared against.
"""

from typing import Sequence

import numpy as np

from .models import IntervalResult


def compute_uniform_intensity(results: Sequence[IntervalResult]) -> float:
    """
    Global uniform intensity over all intervals.

    ``U = (sum of changed pixels / mean total pixels) / sum of durations * 100``

    Args:
        results: Interval results of a run (order is irrelevant)

    Returns:
        Uniform intensity in percent per year, 0 for an empty or blank series
    """
    if not results:
        return 0.0

    totals = np.array([r.total_pixels for r in results], dtype=float)
    changed = np.array([r.changed_pixels for r in results], dtype=float)
    durations = np.array([r.duration_years for r in results], dtype=float)

    mean_total = totals.mean()
    if mean_total <= 0:
        return 0.0

    return float((changed.sum() / mean_total) / durations.sum() * 100)
