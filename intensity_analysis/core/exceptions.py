"""
Exceptions raised by the Intensity Analysis engine.
"""

from typing import Any, Optional


class IntensityAnalysisError(Exception):
    """Base exception for intensity analysis errors."""
    pass


class MalformedTransitionKey(IntensityAnalysisError):
    """A histogram key does not decode to a pair of valid class ids."""

    def __init__(self, key: Any, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed transition key {key!r}: {reason}")


class InsufficientCoverage(IntensityAnalysisError):
    """The region/scale combination yields no valid pixels."""

    def __init__(self, region_key: Any, scale: Optional[float], interval_label: Optional[str] = None):
        self.region_key = region_key
        self.scale = scale
        self.interval_label = interval_label
        where = f" for interval {interval_label}" if interval_label else ""
        super().__init__(f"No valid data found in {region_key} at scale {scale}m{where}.")

    @property
    def remediation(self) -> str:
        return "Try reducing the scale (e.g. 1000m) or checking ROI overlap."


class UnknownInterval(IntensityAnalysisError):
    """A view was requested for an interval that is not part of the run."""

    def __init__(self, label: str, available=()):
        self.label = label
        self.available = list(available)
        super().__init__(f"Unknown interval {label!r}; available: {self.available}")


class EmptyAnalysisRun(IntensityAnalysisError):
    """A view was requested before any interval was computed."""
    pass
