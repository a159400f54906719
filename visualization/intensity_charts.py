"""
Intensity Analysis Charts

Interval-level and category-level charts drawn from the view objects of a
completed run:
- Interval level: annual intensity per interval as columns, uniform
  intensity as a dashed red line
- Category level: annual gain (green) and loss (red) intensity per class,
  reference intensity as a dashed black line
"""

from pathlib import Path
from typing import List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from intensity_analysis.core.aggregation_view import CategoryView, IntervalSeries
from shared_utils import get_logger

from .utils import apply_style_config, save_figure_multiple_formats

logger = get_logger('charts')


def plot_interval_level(series: IntervalSeries) -> plt.Figure:
    """
    Column chart of interval intensities against the uniform intensity.

    Args:
        series: Interval-level view of a run

    Returns:
        Matplotlib figure
    """
    apply_style_config()
    fig, ax = plt.subplots(figsize=(max(6, len(series.labels) * 0.9), 5))

    x_pos = np.arange(len(series.labels))
    ax.bar(x_pos, series.intensities, color='black', width=0.6, label='Annual Intensity')
    ax.axhline(series.uniform_intensity, color='red', linestyle=(0, (4, 4)), linewidth=2,
               label='Uniform')

    ax.set_xticks(x_pos)
    ax.set_xticklabels(series.labels, rotation=45, ha='right')
    ax.set_xlabel('Interval')
    ax.set_ylabel('% Change / Year')
    ax.set_title('Interval Level Intensity')
    ax.legend(loc='upper right')
    ax.grid(axis='y', linestyle='--', alpha=0.5)

    fig.text(0.01, 0.01, f'Global Uniform Intensity (U): {series.uniform_intensity:.2f}%',
             color='red', fontsize=9)
    fig.tight_layout(rect=(0, 0.04, 1, 1))
    return fig


def plot_category_level(view: CategoryView) -> plt.Figure:
    """
    Horizontal bar chart of category gain and loss intensities.

    Args:
        view: Category-level view for one scope

    Returns:
        Matplotlib figure
    """
    apply_style_config()
    n_classes = len(view.class_names)
    fig, ax = plt.subplots(figsize=(8, max(4.0, n_classes * 0.45)))

    y_pos = np.arange(n_classes)
    bar_height = 0.38
    ax.barh(y_pos - bar_height / 2, view.gains, height=bar_height, color='green', label='Gain')
    ax.barh(y_pos + bar_height / 2, view.losses, height=bar_height, color='red', label='Loss')
    ax.axvline(view.reference_intensity, color='black', linestyle=(0, (4, 4)), linewidth=2,
               label='Ref Intensity')

    ax.set_yticks(y_pos)
    ax.set_yticklabels(view.class_names, fontsize=12, fontweight='bold')
    ax.invert_yaxis()
    ax.set_xlabel('Annual Intensity (%)')
    ax.set_ylabel('Category')
    ax.set_title(view.title)
    ax.legend(loc='lower right')
    ax.grid(axis='x', linestyle='--', alpha=0.5)

    fig.text(0.01, 0.01, view.reference_label, color='gray', fontsize=9)
    fig.tight_layout(rect=(0, 0.04, 1, 1))
    return fig


def save_intensity_charts(series: IntervalSeries, view: CategoryView,
                          output_dir: Union[str, Path],
                          formats: Optional[List[str]] = None) -> List[str]:
    """
    Draw and save both charts into ``output_dir``.

    Returns:
        List of saved file paths
    """
    formats = formats or ['png']
    output_dir = Path(output_dir)
    saved = []

    fig = plot_interval_level(series)
    saved += save_figure_multiple_formats(fig, output_dir / 'interval_level', formats, logger=logger)
    plt.close(fig)

    scope_slug = 'average' if view.is_average else view.scope.replace(' ', '_')
    fig = plot_category_level(view)
    saved += save_figure_multiple_formats(fig, output_dir / f'category_level_{scope_slug}', formats,
                                          logger=logger)
    plt.close(fig)

    return saved
