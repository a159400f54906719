"""
Charts for Intensity Analysis results.
"""

from .intensity_charts import plot_interval_level, plot_category_level, save_intensity_charts

__all__ = [
    "plot_interval_level",
    "plot_category_level",
    "save_intensity_charts"
]
