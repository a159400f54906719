#!/usr/bin/env python3
"""
Land-cover change Intensity Analysis script.

Command-line interface for running interval- and category-level Intensity
Analysis over an exported transition table. This is a thin wrapper around the
core IntensityAnalysisPipeline class.

Usage:
    python run_intensity_analysis.py [OPTIONS]

Examples:
    # Whole study area with the configured years and scale
    python run_intensity_analysis.py --table data/raw/transition_tables/transitions.csv

    # One region at 1000 m, category view for one interval, charts saved
    python run_intensity_analysis.py --region EAF --scale 1000 --scope 2000-2005 --plot-dir figures
"""

import argparse
import sys
from pathlib import Path

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from intensity_analysis.core.intensity_pipeline import IntensityAnalysisPipeline
from intensity_analysis.core.exceptions import InsufficientCoverage, IntensityAnalysisError
from intensity_analysis.core.providers import TransitionTableSource
from shared_utils import setup_logging


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Land-cover change Intensity Analysis (interval and category level)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration file (default: component config.yaml)'
    )
    parser.add_argument(
        '--table',
        type=str,
        help='Transition table CSV (default: data.transition_table from config)'
    )
    parser.add_argument(
        '--region',
        type=str,
        help='Region to analyse (default: regions.whole_label from config)'
    )
    parser.add_argument(
        '--scale',
        type=float,
        help='Sampling resolution in meters (default: analysis.scale from config)'
    )
    parser.add_argument(
        '--years',
        type=int,
        nargs='+',
        help='Analysis years (default: analysis.years from config)'
    )
    parser.add_argument(
        '--scope',
        type=str,
        help='Category view scope: an interval label such as 2000-2005 (default: average)'
    )
    parser.add_argument(
        '--plot-dir',
        type=str,
        help='Directory to save interval and category charts'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Optional file to write the log to'
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the intensity analysis script."""
    args = parse_arguments(argv)
    logger = setup_logging(level=args.log_level, component_name='run_intensity_analysis',
                           log_file=args.log_file)

    try:
        pipeline = IntensityAnalysisPipeline(args.config)
        if args.table:
            source = TransitionTableSource.from_config(pipeline.config, path=args.table)
            pipeline.raster_provider = pipeline.region_provider = pipeline.histogrammer = source
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error initializing pipeline: {e}")
        return 1

    try:
        run = pipeline.run(region_key=args.region, scale=args.scale, years=args.years)
    except InsufficientCoverage as e:
        logger.error(f"ERROR: {e}")
        logger.error(e.remediation)
        return 1
    except (IntensityAnalysisError, FileNotFoundError, LookupError, ValueError) as e:
        logger.error(f"Error during analysis: {e}")
        return 1

    if run is None:
        logger.error("Analysis was superseded before it completed")
        return 1

    pipeline.print_summary(run)

    try:
        view = pipeline.category_view(args.scope, run=run)
    except IntensityAnalysisError as e:
        logger.error(f"Error building category view: {e}")
        return 1

    if args.scope:
        logger.info(f"\n{view.title}:")
        logger.info("\n" + view.to_frame().round(4).to_string(index=False))
    logger.info(view.reference_label)

    if args.plot_dir:
        from visualization.intensity_charts import save_intensity_charts
        saved = save_intensity_charts(pipeline.interval_series(run), view, args.plot_dir)
        logger.info(f"Saved {len(saved)} chart files to: {args.plot_dir}")

    logger.info("Intensity analysis complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
