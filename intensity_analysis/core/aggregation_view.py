"""
Result Aggregation View

Read-only views over a completed AnalysisRun for the presentation layer:
the interval-level series with its uniform reference line, and the
category-level gain/loss intensities for either the average over all
intervals or a single interval. Switching scope never touches the
histograms again.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .class_scheme import ClassScheme
from .exceptions import EmptyAnalysisRun
from .models import AnalysisRun, Interval

AVERAGE_SCOPE = "Average (All Years)"


@dataclass(frozen=True)
class IntervalSeries:
    """Interval-level chart data."""
    labels: List[str]
    intensities: List[float]
    uniform_intensity: float

    @property
    def uniform_line(self) -> List[float]:
        return [self.uniform_intensity] * len(self.labels)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'interval': self.labels,
            'intensity_pct_per_yr': self.intensities,
            'uniform_intensity': self.uniform_line,
        })


@dataclass(frozen=True)
class CategoryView:
    """Category-level chart data for one scope."""
    scope: str
    is_average: bool
    reference_intensity: float
    class_ids: List[int]
    class_names: List[str]
    gains: List[float]
    losses: List[float]

    @property
    def title(self) -> str:
        if self.is_average:
            return 'Category Level (Average)'
        return f'Category Level ({self.scope})'

    @property
    def reference_label(self) -> str:
        if self.is_average:
            return 'Black dashed line = Uniform Intensity (U)'
        return f'Black dashed line = Interval Intensity ({self.scope})'

    @property
    def reference_line(self) -> List[float]:
        return [self.reference_intensity] * len(self.class_ids)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'class_id': self.class_ids,
            'class_name': self.class_names,
            'gain_intensity_pct_yr': self.gains,
            'loss_intensity_pct_yr': self.losses,
            'reference_intensity': self.reference_line,
        })


def _require_results(run: Optional[AnalysisRun]) -> AnalysisRun:
    if run is None or len(run) == 0:
        raise EmptyAnalysisRun("No completed interval results to build a view from")
    return run


def interval_series(run: AnalysisRun) -> IntervalSeries:
    """Interval intensities in interval order plus the uniform intensity."""
    run = _require_results(run)
    return IntervalSeries(
        labels=run.labels,
        intensities=[result.interval_intensity for result in run],
        uniform_intensity=run.global_uniform_intensity,
    )


def scope_options(run: AnalysisRun, average_label: str = AVERAGE_SCOPE) -> List[str]:
    """Selectable scopes: the average followed by every interval label."""
    run = _require_results(run)
    return [average_label] + run.labels


def category_view(run: AnalysisRun,
                  class_scheme: ClassScheme,
                  scope: Union[str, Interval] = AVERAGE_SCOPE,
                  average_label: str = AVERAGE_SCOPE) -> CategoryView:
    """
    Category gain/loss intensities and reference line for a scope.

    For the average scope each class's intensities are the arithmetic mean
    over the intervals holding a stat for that class, and the reference is
    the uniform intensity. For an interval scope the stats are reported as
    they are, against that interval's intensity.

    Args:
        run: Completed analysis run
        class_scheme: Order and names of the category axis
        scope: ``average_label`` or an interval label / Interval
        average_label: Label that selects the average scope

    Returns:
        CategoryView

    Raises:
        EmptyAnalysisRun: If the run holds no interval results
        UnknownInterval: If the interval label is not part of the run
    """
    run = _require_results(run)
    label = scope.label if isinstance(scope, Interval) else str(scope)

    if label == average_label:
        collected: Dict[int, Dict[str, List[float]]] = {}
        for result in run:
            for stat in result.category_stats:
                entry = collected.setdefault(stat.class_id, {'gain': [], 'loss': []})
                entry['gain'].append(stat.gain_intensity)
                entry['loss'].append(stat.loss_intensity)

        stats = {
            class_id: (float(np.mean(values['gain'])), float(np.mean(values['loss'])))
            for class_id, values in collected.items()
        }
        reference = run.global_uniform_intensity
        is_average = True
    else:
        result = run.get(label)
        stats = {
            class_id: (stat.gain_intensity, stat.loss_intensity)
            for class_id, stat in result.stats_by_class().items()
        }
        reference = result.interval_intensity
        is_average = False

    ids, names, gains, losses = [], [], [], []
    for lc in class_scheme:
        if lc.id not in stats:
            continue
        gain, loss = stats[lc.id]
        ids.append(lc.id)
        names.append(lc.name)
        gains.append(gain)
        losses.append(loss)

    return CategoryView(
        scope=label,
        is_average=is_average,
        reference_intensity=reference,
        class_ids=ids,
        class_names=names,
        gains=gains,
        losses=losses,
    )
