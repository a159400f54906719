"""
Path utilities for the land-cover Intensity Analysis toolkit.

Helpers for resolving configured paths and creating output directories.
"""

from pathlib import Path
from typing import Union, Optional


def ensure_directory(path: Union[str, Path], parents: bool = True) -> Path:
    """
    Ensure directory exists, creating it if necessary.

    Args:
        path: Directory path to create
        parents: Whether to create parent directories

    Returns:
        Path: Created directory path

    Examples:
        >>> figures_dir = ensure_directory("data/results/figures")
    """
    path = Path(path)
    path.mkdir(parents=parents, exist_ok=True)
    return path


def resolve_path(path: Union[str, Path], base_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve path to absolute path, optionally relative to base_path.

    Args:
        path: Path to resolve
        base_path: Base path for relative resolution (default: current directory)

    Returns:
        Path: Resolved absolute path

    Examples:
        >>> abs_path = resolve_path("data/raw/transitions.csv")
        >>> abs_path = resolve_path("transitions.csv", base_path="/project/data")
    """
    path = Path(path)

    if path.is_absolute():
        return path

    if base_path:
        return (Path(base_path) / path).resolve()

    return path.resolve()
