"""
Visualization Utilities

Common helpers for the Intensity Analysis charts: matplotlib styling and
figure export.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import matplotlib.pyplot as plt

from shared_utils import ensure_directory

DEFAULT_STYLE = {
    'font.family': 'sans-serif',
    'figure.dpi': 100,
    'savefig.dpi': 300,
}


def apply_style_config(style: Optional[Dict[str, Any]] = None) -> None:
    """
    Apply matplotlib style parameters.

    Args:
        style: rcParams overrides; DEFAULT_STYLE when omitted
    """
    plt.rcParams.update(style if style is not None else DEFAULT_STYLE)


def save_figure_multiple_formats(
    fig: plt.Figure,
    output_path: Union[str, Path],
    formats: Sequence[str] = ('png',),
    dpi: int = 300,
    logger: Optional[logging.Logger] = None
) -> List[str]:
    """
    Save figure in several formats next to each other.

    Args:
        fig: Matplotlib figure object
        output_path: Base output path (extension is replaced)
        formats: File formats to write
        dpi: Resolution for raster formats
        logger: Optional logger for output messages

    Returns:
        List of saved file paths
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    base_path = Path(output_path).with_suffix('')
    ensure_directory(base_path.parent)
    saved_files = []

    for fmt in formats:
        output_file = f"{base_path}.{fmt}"
        fig.savefig(output_file, format=fmt, dpi=dpi, bbox_inches='tight')
        saved_files.append(output_file)
        logger.info(f"Saved figure: {output_file}")

    return saved_files
