"""
Data model for the Intensity Analysis engine.

Plain immutable records passed between the calculators. Transition tables
are built fresh per interval and dropped once the interval result exists;
an AnalysisRun is built once per analysis and replaced wholesale.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .class_scheme import ClassScheme
from .exceptions import UnknownInterval

Number = Union[int, float]


@dataclass(frozen=True)
class Interval:
    """Time interval between two analysis years."""
    start_year: int
    end_year: int

    def __post_init__(self):
        if self.end_year <= self.start_year:
            raise ValueError(
                f"Interval end year {self.end_year} must be after start year {self.start_year}"
            )

    @property
    def duration_years(self) -> int:
        return self.end_year - self.start_year

    @property
    def label(self) -> str:
        return f"{self.start_year}-{self.end_year}"

    def __str__(self) -> str:
        return self.label


def build_intervals(years: Sequence[int]) -> List[Interval]:
    """
    Consecutive intervals for a strictly increasing list of years.

    Args:
        years: Analysis years, e.g. [1985, 1990, 2000]

    Returns:
        List of ``len(years) - 1`` intervals

    Raises:
        ValueError: If fewer than two years are given or years do not increase
    """
    years = [int(y) for y in years]
    if len(years) < 2:
        raise ValueError(f"At least two analysis years are required, got {years}")
    for earlier, later in zip(years, years[1:]):
        if later <= earlier:
            raise ValueError(f"Analysis years must be strictly increasing: {years}")
    return [Interval(y1, y2) for y1, y2 in zip(years, years[1:])]


@dataclass(frozen=True)
class TransitionRecord:
    """Pixels that moved from one class to another (or stayed) in an interval."""
    from_class: int
    to_class: int
    pixel_count: Number

    @property
    def is_persistence(self) -> bool:
        return self.from_class == self.to_class


@dataclass(frozen=True)
class CategoryStat:
    """Annual gain and loss intensity of one class in one interval."""
    class_id: int
    gain_intensity: float
    loss_intensity: float
    start_pixels: Number = 0
    end_pixels: Number = 0
    persist_pixels: Number = 0

    @property
    def gain_pixels(self) -> Number:
        return self.end_pixels - self.persist_pixels

    @property
    def loss_pixels(self) -> Number:
        return self.start_pixels - self.persist_pixels


@dataclass(frozen=True)
class IntervalResult:
    """Interval-level and category-level results for one interval."""
    interval: Interval
    total_pixels: Number
    persist_pixels: Number
    changed_pixels: Number
    interval_intensity: float
    category_stats: Tuple[CategoryStat, ...] = ()

    @property
    def label(self) -> str:
        return self.interval.label

    @property
    def duration_years(self) -> int:
        return self.interval.duration_years

    def stats_by_class(self) -> Dict[int, CategoryStat]:
        return {stat.class_id: stat for stat in self.category_stats}


@dataclass(frozen=True)
class AnalysisContext:
    """
    Selection a run is computed for.

    A new context is created for every run; ``run_id`` increases
    monotonically so results of superseded runs can be recognised.
    """
    region_key: Any
    scale: Optional[float]
    years: Tuple[int, ...]
    class_scheme: ClassScheme
    run_id: int = 0

    @property
    def intervals(self) -> List[Interval]:
        return build_intervals(self.years)


@dataclass(frozen=True)
class AnalysisRun:
    """All interval results of one analysis plus the uniform intensity."""
    results: Tuple[IntervalResult, ...]
    global_uniform_intensity: float
    context: Optional[AnalysisContext] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[IntervalResult]:
        return iter(self.results)

    @property
    def labels(self) -> List[str]:
        return [result.label for result in self.results]

    def get(self, label: str) -> IntervalResult:
        """
        Interval result for a label such as ``"1990-1995"``.

        Raises:
            UnknownInterval: If the run has no such interval
        """
        for result in self.results:
            if result.label == label:
                return result
        raise UnknownInterval(label, self.labels)
