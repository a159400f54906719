"""
Category Intensity Calculator

Category level of Intensity Analysis. Loss of a class is measured against
the area it had at the start of the interval and gain against the area it
has at the end, both annualised as percent per year.

Every class of the scheme gets a CategoryStat, with zero intensities when
the class is absent from the interval, so category axes stay complete.
"""

from typing import Dict, Iterable, Tuple

from .class_scheme import ClassScheme
from .interval_intensity import annual_intensity
from .models import CategoryStat, Number, TransitionRecord


def compute_category_intensities(records: Iterable[TransitionRecord],
                                 duration_years: Number,
                                 class_scheme: ClassScheme) -> Tuple[CategoryStat, ...]:
    """
    Annual gain and loss intensity for every class of the scheme.

    Args:
        records: Transition records of one interval
        duration_years: Interval length in years (> 0)
        class_scheme: Classes to report, in output order

    Returns:
        Tuple of CategoryStat in scheme order
    """
    if duration_years <= 0:
        raise ValueError(f"Interval duration must be positive, got {duration_years}")

    start: Dict[int, Number] = {}
    end: Dict[int, Number] = {}
    persist: Dict[int, Number] = {}

    for record in records:
        start[record.from_class] = start.get(record.from_class, 0) + record.pixel_count
        end[record.to_class] = end.get(record.to_class, 0) + record.pixel_count
        if record.is_persistence:
            persist[record.from_class] = persist.get(record.from_class, 0) + record.pixel_count

    stats = []
    for lc in class_scheme:
        start_px = start.get(lc.id, 0)
        end_px = end.get(lc.id, 0)
        persist_px = persist.get(lc.id, 0)

        stats.append(CategoryStat(
            class_id=lc.id,
            gain_intensity=annual_intensity(end_px - persist_px, end_px, duration_years),
            loss_intensity=annual_intensity(start_px - persist_px, start_px, duration_years),
            start_pixels=start_px,
            end_pixels=end_px,
            persist_pixels=persist_px,
        ))

    return tuple(stats)
