"""
Intensity Analysis Pipeline

Orchestrates one analysis run: resolves the selected region, checks that it
holds data, requests one transition histogram per interval from the zonal
histogrammer, turns each histogram into interval- and category-level
results and finally attaches the uniform intensity of the whole series.

Histogram requests are independent and are issued concurrently; results are
keyed by interval and assembled in interval order. A run is published only
when every interval has completed and no newer run has been started since.
"""

import concurrent.futures
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from tqdm import tqdm

from shared_utils import (
    get_logger, load_config, validate_config, get_config_value,
    log_pipeline_start, log_pipeline_end, log_section
)

from .aggregation_view import (
    AVERAGE_SCOPE, CategoryView, IntervalSeries,
    category_view, interval_series, scope_options
)
from .category_intensity import compute_category_intensities
from .class_scheme import ClassScheme
from .exceptions import EmptyAnalysisRun, InsufficientCoverage
from .interval_intensity import compute_interval_intensity
from .models import AnalysisContext, AnalysisRun, Interval, IntervalResult, build_intervals
from .providers import RasterProvider, RegionProvider, TransitionTableSource, ZonalHistogrammer
from .transition_table import build_transition_table
from .uniform_intensity import compute_uniform_intensity

REQUIRED_SECTIONS = ['classes', 'analysis']


def process_interval(histogram: Mapping[Any, Any], interval: Interval,
                     class_scheme: ClassScheme) -> IntervalResult:
    """
    Interval and category results for one interval's histogram.

    Args:
        histogram: Encoded transition key -> pixel count
        interval: Interval the histogram belongs to
        class_scheme: Canonical classes

    Returns:
        IntervalResult
    """
    records = build_transition_table(histogram, class_scheme)
    totals = compute_interval_intensity(records, interval.duration_years)
    stats = compute_category_intensities(records, interval.duration_years, class_scheme)
    return IntervalResult(
        interval=interval,
        total_pixels=totals.total_pixels,
        persist_pixels=totals.persist_pixels,
        changed_pixels=totals.changed_pixels,
        interval_intensity=totals.interval_intensity,
        category_stats=stats,
    )


class IntensityAnalysisPipeline:
    """
    Land-cover change Intensity Analysis at interval and category level.

    Collaborators default to a TransitionTableSource loaded from the
    ``data.transition_table`` setting the first time they are needed.
    """

    def __init__(self, config: Optional[Union[str, Path, Dict]] = None,
                 raster_provider: Optional[RasterProvider] = None,
                 region_provider: Optional[RegionProvider] = None,
                 histogrammer: Optional[ZonalHistogrammer] = None):
        """
        Initialize the pipeline.

        Args:
            config: Configuration dictionary or path to config file
            raster_provider: Source of per-year land-cover maps
            region_provider: Resolves region selection keys
            histogrammer: Computes transition histograms
        """
        if isinstance(config, (str, Path)):
            self.config = load_config(config, component_name="intensity_analysis")
        elif isinstance(config, dict):
            self.config = config
        else:
            self.config = load_config(component_name="intensity_analysis")

        validate_config(self.config, REQUIRED_SECTIONS)

        self.logger = get_logger('pipeline')
        self.logger.setLevel(get_config_value(self.config, 'logging.level', 'INFO').upper())

        self.class_scheme = ClassScheme.from_config(self.config)
        self.average_label = get_config_value(self.config, 'analysis.average_label', AVERAGE_SCOPE)
        self.num_workers = int(get_config_value(self.config, 'compute.num_workers', 4))

        self.raster_provider = raster_provider
        self.region_provider = region_provider
        self.histogrammer = histogrammer

        self._lock = threading.Lock()
        self._latest_run_id = 0
        self._current_run: Optional[AnalysisRun] = None

        self.logger.info(f"Initialized IntensityAnalysisPipeline with {len(self.class_scheme)} classes")

    # ==================== COLLABORATORS ====================

    def _ensure_collaborators(self) -> None:
        if self.raster_provider and self.region_provider and self.histogrammer:
            return
        source = TransitionTableSource.from_config(self.config)
        self.raster_provider = self.raster_provider or source
        self.region_provider = self.region_provider or source
        self.histogrammer = self.histogrammer or source

    # ==================== RUN STATE ====================

    @property
    def current_run(self) -> Optional[AnalysisRun]:
        """Latest fully completed run, or None before the first one."""
        with self._lock:
            return self._current_run

    def is_current(self, context: AnalysisContext) -> bool:
        with self._lock:
            return context.run_id == self._latest_run_id

    def _publish(self, run: AnalysisRun) -> bool:
        with self._lock:
            if run.context.run_id != self._latest_run_id:
                return False
            self._current_run = run
            return True

    def new_context(self, region_key: Any = None, scale: Optional[float] = None,
                    years: Optional[Sequence[int]] = None) -> AnalysisContext:
        """
        Fresh context for a run; supersedes every earlier context.

        Unset arguments fall back to ``regions.whole_label``,
        ``analysis.scale`` and ``analysis.years``.
        """
        if region_key is None:
            region_key = get_config_value(self.config, 'regions.whole_label')
        if scale is None:
            scale = get_config_value(self.config, 'analysis.scale')
        if years is None:
            years = get_config_value(self.config, 'analysis.years', [])

        if scale is not None:
            if scale <= 0:
                raise ValueError(f"Scale must be positive, got {scale}")
            min_scale = get_config_value(self.config, 'analysis.min_scale')
            max_scale = get_config_value(self.config, 'analysis.max_scale')
            if (min_scale is not None and scale < min_scale) or (max_scale is not None and scale > max_scale):
                self.logger.warning(f"Scale {scale}m outside configured range {min_scale}-{max_scale}m")

        build_intervals(years)

        with self._lock:
            self._latest_run_id += 1
            run_id = self._latest_run_id

        return AnalysisContext(
            region_key=region_key,
            scale=scale,
            years=tuple(int(y) for y in years),
            class_scheme=self.class_scheme,
            run_id=run_id,
        )

    # ==================== ANALYSIS STEPS ====================

    def check_coverage(self, context: AnalysisContext, region: Any) -> float:
        """
        Valid pixels of the first analysis year inside the region.

        Raises:
            InsufficientCoverage: If the region holds no valid pixels at this scale
        """
        first_map = self.raster_provider.get_raster(context.years[0])
        count = self.histogrammer.count_valid(first_map, region, context.scale)
        if not count:
            raise InsufficientCoverage(context.region_key, context.scale)
        self.logger.info(f"Data check passed: {count:,.0f} pixels found.")
        return count

    def _fetch_histogram(self, context: AnalysisContext, region: Any,
                         interval: Interval) -> Mapping[Any, Any]:
        start_map = self.raster_provider.get_raster(interval.start_year)
        end_map = self.raster_provider.get_raster(interval.end_year)
        return self.histogrammer.histogram(start_map, end_map, region, context.scale)

    def request_histograms(self, context: AnalysisContext,
                           region: Any) -> Optional[Dict[Interval, Mapping[Any, Any]]]:
        """
        Fan out one histogram request per interval.

        Returns:
            Histograms keyed by interval, or None when the context was
            superseded before all requests completed
        """
        intervals = context.intervals
        histograms: Dict[Interval, Mapping[Any, Any]] = {}
        n_workers = max(1, min(self.num_workers, len(intervals)))

        with concurrent.futures.ThreadPoolExecutor(max_workers=n_workers) as executor:
            futures = {
                executor.submit(self._fetch_histogram, context, region, interval): interval
                for interval in intervals
            }
            try:
                for future in tqdm(concurrent.futures.as_completed(futures), total=len(futures),
                                   desc="Transition histograms", disable=len(futures) < 2):
                    interval = futures[future]
                    histograms[interval] = future.result()
                    self.logger.debug(f"Histogram ready for {interval.label}")

                    if not self.is_current(context):
                        self.logger.warning(f"Run {context.run_id} superseded, discarding pending histograms")
                        for pending in futures:
                            pending.cancel()
                        return None
            except Exception:
                for pending in futures:
                    pending.cancel()
                raise

        return histograms

    def run(self, region_key: Any = None, scale: Optional[float] = None,
            years: Optional[Sequence[int]] = None) -> Optional[AnalysisRun]:
        """
        Run the complete interval- and category-level analysis.

        Args:
            region_key: Region selection (default: whole study area)
            scale: Sampling resolution in meters (default: configured scale)
            years: Analysis years (default: configured years)

        Returns:
            The published AnalysisRun, or None if a newer run superseded it

        Raises:
            InsufficientCoverage: If the region/scale yields no data for any interval
            MalformedTransitionKey: If a histogram holds undecodable keys
        """
        self._ensure_collaborators()
        context = self.new_context(region_key, scale, years)

        log_pipeline_start(self.logger, 'intensity analysis', {
            'region': context.region_key,
            'scale_m': context.scale,
            'years': list(context.years),
            'run_id': context.run_id,
        })
        start_time = time.time()

        try:
            region = self.region_provider.get_region(context.region_key)
            self.check_coverage(context, region)

            log_section(self.logger, 'transition histograms')
            histograms = self.request_histograms(context, region)
            if histograms is None:
                log_pipeline_end(self.logger, 'intensity analysis', success=False)
                return None

            log_section(self.logger, 'intensity computation')
            results = []
            for interval in context.intervals:
                result = process_interval(histograms.pop(interval), interval, self.class_scheme)
                self.logger.info(f"  {interval.label}: {result.interval_intensity:.4f} %/yr "
                                 f"({result.changed_pixels:,.0f} of {result.total_pixels:,.0f} changed)")
                results.append(result)

            uniform = compute_uniform_intensity(results)
            self.logger.info(f"Global Uniform Intensity (U): {uniform:.2f}%")

        except Exception:
            log_pipeline_end(self.logger, 'intensity analysis', success=False,
                             elapsed_time=time.time() - start_time)
            raise

        run = AnalysisRun(results=tuple(results), global_uniform_intensity=uniform, context=context)
        if not self._publish(run):
            self.logger.warning(f"Run {context.run_id} completed after a newer run started; discarded")
            log_pipeline_end(self.logger, 'intensity analysis', success=False)
            return None

        log_pipeline_end(self.logger, 'intensity analysis', success=True,
                         elapsed_time=time.time() - start_time)
        return run

    # ==================== VIEWS ====================

    def _resolve_run(self, run: Optional[AnalysisRun]) -> AnalysisRun:
        run = run if run is not None else self.current_run
        if run is None:
            raise EmptyAnalysisRun("No analysis run has completed yet")
        return run

    def interval_series(self, run: Optional[AnalysisRun] = None) -> IntervalSeries:
        return interval_series(self._resolve_run(run))

    def category_view(self, scope: Union[str, Interval, None] = None,
                      run: Optional[AnalysisRun] = None) -> CategoryView:
        """Category view for ``scope`` (default: the average over all intervals)."""
        return category_view(self._resolve_run(run), self.class_scheme,
                             scope if scope is not None else self.average_label,
                             average_label=self.average_label)

    def scope_options(self, run: Optional[AnalysisRun] = None) -> List[str]:
        return scope_options(self._resolve_run(run), self.average_label)

    # ==================== TABLES ====================

    def interval_table(self, run: Optional[AnalysisRun] = None) -> pd.DataFrame:
        """Interval-level results, one row per interval."""
        run = self._resolve_run(run)
        rows = []
        for result in run:
            rows.append({
                'interval': result.label,
                'year_initial': result.interval.start_year,
                'year_final': result.interval.end_year,
                'duration_yrs': result.duration_years,
                'total_pixels': result.total_pixels,
                'persist_pixels': result.persist_pixels,
                'changed_pixels': result.changed_pixels,
                'intensity_pct_per_yr': result.interval_intensity,
                'uniform_intensity': run.global_uniform_intensity,
            })
        return pd.DataFrame(rows)

    def category_table(self, run: Optional[AnalysisRun] = None) -> pd.DataFrame:
        """Category-level results, one row per interval and class."""
        run = self._resolve_run(run)
        rows = []
        for result in run:
            for stat in result.category_stats:
                rows.append({
                    'interval': result.label,
                    'class_id': stat.class_id,
                    'class_name': self.class_scheme.name_of(stat.class_id),
                    'start_pixels': stat.start_pixels,
                    'end_pixels': stat.end_pixels,
                    'gain_pixels': stat.gain_pixels,
                    'loss_pixels': stat.loss_pixels,
                    'gain_intensity_pct_yr': stat.gain_intensity,
                    'loss_intensity_pct_yr': stat.loss_intensity,
                    'interval_intensity': result.interval_intensity,
                })
        return pd.DataFrame(rows)

    def print_summary(self, run: Optional[AnalysisRun] = None) -> None:
        """Log interval-level and average category-level tables."""
        run = self._resolve_run(run)

        self.logger.info("\nInterval Level:")
        summary = self.interval_table(run)[['interval', 'duration_yrs', 'changed_pixels', 'intensity_pct_per_yr']]
        self.logger.info("\n" + summary.round(4).to_string(index=False))
        self.logger.info(f"Global Uniform Intensity (U): {run.global_uniform_intensity:.2f}%")

        view = self.category_view(run=run)
        self.logger.info(f"\n{view.title}:")
        self.logger.info("\n" + view.to_frame().round(4).to_string(index=False))
