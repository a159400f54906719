"""
Collaborator interfaces and tabular implementations.

The engine only sees transition histograms. Where they come from is up to
three collaborators: a raster provider (one classified map per year), a
region provider (a selection key to an opaque region) and a zonal
histogrammer (two maps + region + scale to encoded transition counts).

``TransitionTableSource`` implements all three over transition tables
exported from the raster platform, one row per region, interval and
(from, to) pair. ``InMemoryHistogrammer`` does the same over plain dicts.
"""

import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Sequence, Tuple, Union

import pandas as pd

from shared_utils import get_logger, get_config_value, resolve_path

from .class_scheme import KEY_BASE, NODATA_CLASS, ClassScheme
from .exceptions import InsufficientCoverage

logger = get_logger('providers')

DEFAULT_REGION_COLUMN = 'LAB'
DEFAULT_COLUMN_CANDIDATES = ('label', 'name', 'acronym', 'region', 'id')
VALUE_COLUMNS = ('pixels', 'pixel_count', 'count', 'area_km2')
REQUIRED_COLUMNS = ('year_initial', 'year_final', 'from_class', 'to_class')


class RasterProvider(Protocol):
    def get_raster(self, year: int) -> Any:
        """Classified map for ``year``, already reclassified and masked."""
        ...


class RegionProvider(Protocol):
    def get_region(self, selection_key: Any) -> Any:
        """Opaque region descriptor for a user selection."""
        ...


class ZonalHistogrammer(Protocol):
    def histogram(self, start_raster: Any, end_raster: Any, region: Any,
                  scale: Optional[float]) -> Mapping[Any, Any]:
        """Encoded transition key -> pixel count inside ``region``."""
        ...

    def count_valid(self, raster: Any, region: Any, scale: Optional[float]) -> float:
        """Number of valid pixels of ``raster`` inside ``region``."""
        ...


@dataclass(frozen=True)
class YearRaster:
    """Handle for the classified map of one year."""
    year: int


@dataclass(frozen=True)
class RegionSelection:
    """Selected region key and the table regions it covers (empty = all rows)."""
    key: Any
    members: Tuple[Any, ...] = ()


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip, lower-case and underscore column names."""
    df = df.copy()
    df.columns = df.columns.str.strip().str.lower().str.replace(' ', '_')
    return df


def detect_region_column(columns: Iterable[str],
                         preferred: str = DEFAULT_REGION_COLUMN,
                         candidates: Sequence[str] = DEFAULT_COLUMN_CANDIDATES) -> Optional[str]:
    """
    Column holding region identifiers.

    ``preferred`` wins when present; otherwise the first column whose
    lower-cased name is one of ``candidates``. Returns None when nothing
    matches.
    """
    columns = list(columns)
    lowered = {c.lower(): c for c in columns}
    if preferred and preferred.lower() in lowered:
        return lowered[preferred.lower()]
    wanted = {c.lower() for c in candidates}
    for column in columns:
        if column.lower() in wanted:
            return column
    return None


class TransitionTableSource:
    """
    Raster provider, region provider and zonal histogrammer over a
    transition table.

    Args:
        table: Rows with year_initial, year_final, from_class, to_class and
            a count column (pixels, pixel_count, count or area_km2); an
            optional region column and an optional scale column
        region_column: Preferred region column name
        column_candidates: Fallback region column names
        targets: Regions that make up the whole study area
        whole_label: Selection key that stands for all ``targets``
        remap: Raw source code -> canonical id lookup applied to the
            from/to columns; rows mapped to nodata are dropped
    """

    def __init__(self, table: pd.DataFrame,
                 region_column: str = DEFAULT_REGION_COLUMN,
                 column_candidates: Sequence[str] = DEFAULT_COLUMN_CANDIDATES,
                 targets: Optional[Sequence[Any]] = None,
                 whole_label: Optional[str] = None,
                 remap: Optional[Mapping[int, int]] = None):
        table = normalize_columns(table)

        missing = [c for c in REQUIRED_COLUMNS if c not in table.columns]
        if missing:
            raise ValueError(f"Transition table is missing columns: {missing}")

        value_column = next((c for c in VALUE_COLUMNS if c in table.columns), None)
        if value_column is None:
            raise ValueError(f"Transition table needs one of the count columns {list(VALUE_COLUMNS)}")

        self.value_column = value_column
        self.region_column = detect_region_column(
            [c for c in table.columns if c not in REQUIRED_COLUMNS + VALUE_COLUMNS],
            region_column, column_candidates
        )
        self.has_scale = 'scale' in table.columns
        self.targets = list(targets) if targets else []
        self.whole_label = whole_label

        for column in REQUIRED_COLUMNS:
            table[column] = table[column].astype(int)

        if remap is not None:
            table = self._reclassify(table, remap)
        self.table = table

        logger.info(f"Transition table: {len(table)} rows, count column '{value_column}', "
                    f"region column '{self.region_column}'")

    @staticmethod
    def _reclassify(table: pd.DataFrame, remap: Mapping[int, int]) -> pd.DataFrame:
        """Map raw class codes to canonical ids and drop rows touching nodata."""
        table = table.copy()
        for column in ('from_class', 'to_class'):
            table[column] = table[column].map(remap).fillna(NODATA_CLASS).astype(int)
        valid = (table['from_class'] != NODATA_CLASS) & (table['to_class'] != NODATA_CLASS)
        logger.info(f"Reclassified raw codes: {(~valid).sum()} rows mapped to nodata dropped")
        return table[valid]

    @classmethod
    def from_csv(cls, path: Union[str, Path], **kwargs) -> 'TransitionTableSource':
        """Load a transition table CSV."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Transition table not found: {path}")
        logger.info(f"Loading transition table from: {path}")
        return cls(pd.read_csv(path), **kwargs)

    @classmethod
    def from_config(cls, config: Dict[str, Any],
                    path: Optional[Union[str, Path]] = None) -> 'TransitionTableSource':
        """
        Load the table named in ``data.transition_table`` with the ``regions``
        settings. With ``data.raw_codes`` set, class columns hold raw source
        codes and are reclassified through the ``reclassification`` section.
        """
        if path is None:
            path = get_config_value(config, 'data.transition_table')
            if path is None:
                raise ValueError("No transition table configured (data.transition_table)")
        remap = None
        if get_config_value(config, 'data.raw_codes', False):
            remap = ClassScheme.from_config(config).remap_table()
        return cls.from_csv(
            resolve_path(path),
            region_column=get_config_value(config, 'regions.column', DEFAULT_REGION_COLUMN),
            column_candidates=get_config_value(config, 'regions.column_candidates',
                                               DEFAULT_COLUMN_CANDIDATES),
            targets=get_config_value(config, 'regions.targets'),
            whole_label=get_config_value(config, 'regions.whole_label'),
            remap=remap,
        )

    @property
    def years(self) -> list:
        return sorted(set(self.table['year_initial']) | set(self.table['year_final']))

    @property
    def regions(self) -> list:
        if self.region_column is None:
            return []
        return sorted(self.table[self.region_column].dropna().unique().tolist(), key=str)

    # ==================== COLLABORATOR METHODS ====================

    def get_raster(self, year: int) -> YearRaster:
        year = int(year)
        if year not in self.years:
            raise LookupError(f"No land-cover map for year {year}; available: {self.years}")
        return YearRaster(year)

    def get_region(self, selection_key: Any) -> RegionSelection:
        if self.region_column is None:
            return RegionSelection(selection_key)

        if self.whole_label is not None and selection_key == self.whole_label:
            members = tuple(t for t in self.targets if t in self.regions)
            if not members:
                raise LookupError(f"None of the target regions {self.targets} are in the table")
            return RegionSelection(selection_key, members)

        if selection_key not in self.regions:
            raise LookupError(f"Unknown region {selection_key!r}; available: {self.regions}")
        return RegionSelection(selection_key, (selection_key,))

    def _select(self, region: RegionSelection, scale: Optional[float]) -> pd.DataFrame:
        rows = self.table
        if region.members and self.region_column is not None:
            rows = rows[rows[self.region_column].isin(region.members)]
        if self.has_scale and scale is not None:
            rows = rows[rows['scale'] == scale]
        return rows

    def histogram(self, start_raster: YearRaster, end_raster: YearRaster,
                  region: RegionSelection, scale: Optional[float]) -> Dict[int, float]:
        rows = self._select(region, scale)
        rows = rows[(rows['year_initial'] == start_raster.year) & (rows['year_final'] == end_raster.year)]

        label = f"{start_raster.year}-{end_raster.year}"
        if rows.empty or rows[self.value_column].sum() <= 0:
            raise InsufficientCoverage(region.key, scale, label)

        grouped = rows.groupby(['from_class', 'to_class'])[self.value_column].sum()
        return {
            int(from_class) * KEY_BASE + int(to_class): value.item() if hasattr(value, 'item') else value
            for (from_class, to_class), value in grouped.items()
        }

    def count_valid(self, raster: YearRaster, region: RegionSelection,
                    scale: Optional[float]) -> float:
        rows = self._select(region, scale)
        as_start = rows[rows['year_initial'] == raster.year]
        if not as_start.empty:
            # A year can start several exported intervals; count one of them
            first_end = as_start['year_final'].min()
            return float(as_start.loc[as_start['year_final'] == first_end, self.value_column].sum())
        as_end = rows[rows['year_final'] == raster.year]
        if as_end.empty:
            return 0.0
        first_start = as_end['year_initial'].max()
        return float(as_end.loc[as_end['year_initial'] == first_start, self.value_column].sum())


def _is_count(value: Any) -> bool:
    return (isinstance(value, numbers.Real) and not isinstance(value, bool)
            and math.isfinite(value) and value > 0)


class InMemoryHistogrammer:
    """
    Collaborators backed by precomputed histograms.

    Args:
        histograms: ``{(start_year, end_year): {key: count}}``
        regions: Accepted selection keys; any key is accepted when omitted
    """

    def __init__(self, histograms: Mapping[Tuple[int, int], Mapping[Any, Any]],
                 regions: Optional[Iterable[Any]] = None):
        self.histograms = {tuple(k): dict(v) for k, v in histograms.items()}
        self.regions = set(regions) if regions is not None else None

    def get_raster(self, year: int) -> YearRaster:
        return YearRaster(int(year))

    def get_region(self, selection_key: Any) -> RegionSelection:
        if self.regions is not None and selection_key not in self.regions:
            raise LookupError(f"Unknown region {selection_key!r}")
        return RegionSelection(selection_key)

    def histogram(self, start_raster: YearRaster, end_raster: YearRaster,
                  region: RegionSelection, scale: Optional[float]) -> Dict[Any, Any]:
        hist = self.histograms.get((start_raster.year, end_raster.year))
        if not hist:
            raise InsufficientCoverage(region.key, scale, f"{start_raster.year}-{end_raster.year}")
        return dict(hist)

    def count_valid(self, raster: YearRaster, region: RegionSelection,
                    scale: Optional[float]) -> float:
        for (start, _end), hist in sorted(self.histograms.items()):
            if start == raster.year:
                return float(sum(v for v in hist.values() if _is_count(v)))
        return 0.0
