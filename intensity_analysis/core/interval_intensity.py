"""
Interval Intensity Calculator

Interval level of Intensity Analysis: the share of the map that changed
during an interval, annualised and expressed as percent per year.
"""

from dataclasses import dataclass
from typing import Iterable

from .models import Number, TransitionRecord


@dataclass(frozen=True)
class IntervalTotals:
    total_pixels: Number
    persist_pixels: Number
    changed_pixels: Number
    interval_intensity: float


def annual_intensity(part: Number, whole: Number, duration_years: Number) -> float:
    """``part / whole / duration * 100``, or 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    return (part / whole) / duration_years * 100


def compute_interval_intensity(records: Iterable[TransitionRecord],
                               duration_years: Number) -> IntervalTotals:
    """
    Total, persistent and changed pixels plus the annual interval intensity.

    Args:
        records: Transition records of one interval
        duration_years: Interval length in years (> 0)

    Returns:
        IntervalTotals
    """
    if duration_years <= 0:
        raise ValueError(f"Interval duration must be positive, got {duration_years}")

    total = 0
    persist = 0
    for record in records:
        total += record.pixel_count
        if record.is_persistence:
            persist += record.pixel_count

    changed = total - persist
    return IntervalTotals(
        total_pixels=total,
        persist_pixels=persist,
        changed_pixels=changed,
        interval_intensity=annual_intensity(changed, total, duration_years),
    )
