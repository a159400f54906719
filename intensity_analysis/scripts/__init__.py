"""
Executable scripts for the Intensity Analysis component.

Scripts:
    run_intensity_analysis.py: Interval and category level analysis of a transition table
"""

from .run_intensity_analysis import main as run_intensity_analysis

__all__ = [
    "run_intensity_analysis"
]
