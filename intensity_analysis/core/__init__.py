"""
Core modules for the Intensity Analysis component.

Modules:
    class_scheme: Canonical land-cover classes and transition key packing
    models: Intervals, transition records and result records
    transition_table: Histogram decoding into transition records
    interval_intensity: Interval-level intensity
    category_intensity: Category-level gain and loss intensity
    uniform_intensity: Uniform intensity over all intervals
    aggregation_view: Average and per-interval views of a run
    providers: Collaborator protocols and tabular implementations
    intensity_pipeline: Run orchestration
"""

from .intensity_pipeline import IntensityAnalysisPipeline, process_interval
from .aggregation_view import AVERAGE_SCOPE, CategoryView, IntervalSeries
from .providers import TransitionTableSource, InMemoryHistogrammer

__all__ = [
    "IntensityAnalysisPipeline",
    "process_interval",
    "AVERAGE_SCOPE",
    "CategoryView",
    "IntervalSeries",
    "TransitionTableSource",
    "InMemoryHistogrammer"
]
