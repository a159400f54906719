"""
Intensity Analysis Component

Multi-temporal land-cover change Intensity Analysis at interval and
category level:

- Interval intensities (annual % of the map changing per interval)
- Global uniform intensity over the whole time series
- Per-category annual gain and loss intensities
- Average and per-interval category views for presentation

Components:
    core/: Engine, collaborators and pipeline
    scripts/: Executable entry points
    config.yaml: Component configuration
"""

from .core.intensity_pipeline import IntensityAnalysisPipeline, process_interval
from .core.class_scheme import ClassScheme, LandCoverClass
from .core.models import AnalysisRun, Interval, IntervalResult, CategoryStat, TransitionRecord
from .core.exceptions import (
    IntensityAnalysisError, MalformedTransitionKey, InsufficientCoverage,
    UnknownInterval, EmptyAnalysisRun
)

__version__ = "1.0.0"
__component__ = "intensity_analysis"

__all__ = [
    "IntensityAnalysisPipeline",
    "process_interval",
    "ClassScheme",
    "LandCoverClass",
    "AnalysisRun",
    "Interval",
    "IntervalResult",
    "CategoryStat",
    "TransitionRecord",
    "IntensityAnalysisError",
    "MalformedTransitionKey",
    "InsufficientCoverage",
    "UnknownInterval",
    "EmptyAnalysisRun"
]
