"""Tests for the IntensityAnalysisPipeline orchestration."""

import logging

import pytest

from intensity_analysis.core.exceptions import (
    EmptyAnalysisRun,
    InsufficientCoverage,
    MalformedTransitionKey,
    UnknownInterval,
)
from intensity_analysis.core.intensity_pipeline import IntensityAnalysisPipeline
from intensity_analysis.core.providers import InMemoryHistogrammer, TransitionTableSource


def make_pipeline(config, histogrammer):
    return IntensityAnalysisPipeline(config, raster_provider=histogrammer,
                                     region_provider=histogrammer, histogrammer=histogrammer)


class CountingHistogrammer(InMemoryHistogrammer):
    """Counts histogram requests."""

    def __init__(self, histograms):
        super().__init__(histograms)
        self.calls = 0

    def histogram(self, start_raster, end_raster, region, scale):
        self.calls += 1
        return super().histogram(start_raster, end_raster, region, scale)


class SupersedingHistogrammer(InMemoryHistogrammer):
    """Starts a newer run while the first histogram is being computed."""

    def __init__(self, histograms):
        super().__init__(histograms)
        self.pipeline = None
        self.supersede = False

    def histogram(self, start_raster, end_raster, region, scale):
        if self.supersede:
            self.pipeline.new_context()
        return super().histogram(start_raster, end_raster, region, scale)


class TestPipelineInit:

    def test_config_dict(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        assert len(pipeline.class_scheme) == 3
        assert pipeline.num_workers == 2
        assert pipeline.current_run is None

    def test_missing_section(self, config, in_memory):
        del config['classes']
        with pytest.raises(ValueError):
            make_pipeline(config, in_memory)

    def test_config_file(self, tmp_path, config, in_memory):
        import yaml
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump(config))
        pipeline = IntensityAnalysisPipeline(str(path), in_memory, in_memory, in_memory)
        assert pipeline.config['_meta']['config_file'] == str(path.absolute())


class TestPipelineRun:

    def test_end_to_end(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        run = pipeline.run()

        assert run is pipeline.current_run
        assert run.labels == ['2000-2005', '2005-2015']
        assert run.get('2000-2005').interval_intensity == pytest.approx(6.0)
        assert run.get('2005-2015').interval_intensity == pytest.approx(1.5)
        # 60 changed / 150 mean total / 15 years
        assert run.global_uniform_intensity == pytest.approx(40.0 / 15.0)
        assert run.context.region_key == 'Whole Africa'
        assert run.context.scale == 1000

    def test_all_classes_reported(self, config, in_memory):
        run = make_pipeline(config, in_memory).run()
        first = run.get('2000-2005')
        assert [s.class_id for s in first.category_stats] == [1, 2, 3]
        water = first.stats_by_class()[3]
        assert water.gain_intensity == 0.0
        assert water.loss_intensity == 0.0

    def test_explicit_years_subset(self, config, in_memory):
        run = make_pipeline(config, in_memory).run(years=[2005, 2015])
        assert run.labels == ['2005-2015']
        assert run.global_uniform_intensity == pytest.approx(run.get('2005-2015').interval_intensity)

    def test_single_worker(self, config, in_memory):
        config['compute']['num_workers'] = 1
        run = make_pipeline(config, in_memory).run()
        assert run.labels == ['2000-2005', '2005-2015']

    def test_with_transition_table(self, config, transition_frame):
        source = TransitionTableSource(transition_frame, targets=['EAF', 'WAF'],
                                       whole_label='Whole Africa')
        pipeline = make_pipeline(config, source)

        eaf = pipeline.run(region_key='EAF', scale=None)
        assert eaf.get('2000-2005').interval_intensity == pytest.approx(6.0)

        whole = pipeline.run()
        assert whole.get('2000-2005').total_pixels == 160
        assert pipeline.current_run is whole

    def test_invalid_scale(self, config, in_memory):
        with pytest.raises(ValueError):
            make_pipeline(config, in_memory).run(scale=0)

    def test_invalid_years(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        with pytest.raises(ValueError):
            pipeline.run(years=[2005, 2000])
        with pytest.raises(ValueError):
            pipeline.run(years=[2000])

    def test_unknown_region(self, config, histograms):
        histogrammer = InMemoryHistogrammer(histograms, regions=['EAF'])
        with pytest.raises(LookupError):
            make_pipeline(config, histogrammer).run(region_key='XYZ')


class TestPipelineFailures:

    def test_no_data_in_first_year(self, config, histograms):
        histogrammer = InMemoryHistogrammer({(2005, 2015): histograms[(2005, 2015)]})
        pipeline = make_pipeline(config, histogrammer)
        with pytest.raises(InsufficientCoverage) as exc:
            pipeline.run()
        assert exc.value.interval_label is None
        assert pipeline.current_run is None

    def test_interval_without_data_fails_whole_run(self, config, histograms):
        histogrammer = InMemoryHistogrammer({(2000, 2005): histograms[(2000, 2005)]})
        pipeline = make_pipeline(config, histogrammer)
        with pytest.raises(InsufficientCoverage) as exc:
            pipeline.run()
        assert exc.value.interval_label == '2005-2015'
        assert pipeline.current_run is None

    def test_malformed_key_propagates(self, config, histograms):
        histograms[(2005, 2015)] = {101: 10, 104: 5}
        pipeline = make_pipeline(config, InMemoryHistogrammer(histograms))
        with pytest.raises(MalformedTransitionKey):
            pipeline.run()
        assert pipeline.current_run is None

    def test_non_numeric_count_propagates(self, config, histograms):
        histograms[(2005, 2015)] = {101: 10, 102: 'many'}
        pipeline = make_pipeline(config, InMemoryHistogrammer(histograms))
        with pytest.raises(MalformedTransitionKey):
            pipeline.run()

    def test_nan_count_propagates(self, config, histograms):
        histograms[(2000, 2005)] = {101: 50, 102: float('nan')}
        pipeline = make_pipeline(config, InMemoryHistogrammer(histograms))
        with pytest.raises(MalformedTransitionKey):
            pipeline.run()
        assert pipeline.current_run is None

    def test_failed_run_keeps_previous_result(self, config, histograms):
        histogrammer = InMemoryHistogrammer(histograms)
        pipeline = make_pipeline(config, histogrammer)
        first = pipeline.run()

        histogrammer.histograms[(2005, 2015)] = {}
        with pytest.raises(InsufficientCoverage):
            pipeline.run()
        assert pipeline.current_run is first


class TestStaleRuns:

    def test_superseded_run_is_discarded(self, config, histograms):
        config['compute']['num_workers'] = 1
        histogrammer = SupersedingHistogrammer(histograms)
        pipeline = make_pipeline(config, histogrammer)
        histogrammer.pipeline = pipeline

        first = pipeline.run()
        assert first is not None

        histogrammer.supersede = True
        assert pipeline.run() is None
        assert pipeline.current_run is first

    def test_new_context_supersedes_older(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        old = pipeline.new_context()
        new = pipeline.new_context()
        assert new.run_id > old.run_id
        assert not pipeline.is_current(old)
        assert pipeline.is_current(new)


class TestPipelineViews:

    def test_views_before_run(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        with pytest.raises(EmptyAnalysisRun):
            pipeline.category_view()
        with pytest.raises(EmptyAnalysisRun):
            pipeline.interval_series()

    def test_scope_switching_does_not_recompute(self, config, histograms):
        histogrammer = CountingHistogrammer(histograms)
        pipeline = make_pipeline(config, histogrammer)
        pipeline.run()
        assert histogrammer.calls == 2

        average = pipeline.category_view()
        single = pipeline.category_view('2005-2015')
        pipeline.interval_series()
        pipeline.scope_options()

        assert histogrammer.calls == 2
        assert average.is_average
        assert single.reference_intensity == pytest.approx(1.5)

    def test_scope_options(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        pipeline.run()
        assert pipeline.scope_options() == ['Average (All Years)', '2000-2005', '2005-2015']

    def test_unknown_scope(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        pipeline.run()
        with pytest.raises(UnknownInterval):
            pipeline.category_view('1990-1995')

    def test_interval_table(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        pipeline.run()
        table = pipeline.interval_table()
        assert table['interval'].tolist() == ['2000-2005', '2005-2015']
        assert table['changed_pixels'].tolist() == [30, 30]
        assert table['intensity_pct_per_yr'].tolist() == pytest.approx([6.0, 1.5])

    def test_category_table(self, config, in_memory):
        pipeline = make_pipeline(config, in_memory)
        pipeline.run()
        table = pipeline.category_table()
        assert len(table) == 6
        forest = table[(table['interval'] == '2000-2005') & (table['class_name'] == 'Forest')].iloc[0]
        assert forest['gain_pixels'] == 30
        assert forest['gain_intensity_pct_yr'] == pytest.approx(12.0)

    def test_print_summary(self, config, in_memory, caplog):
        pipeline = make_pipeline(config, in_memory)
        pipeline.run()
        caplog.clear()
        with caplog.at_level(logging.INFO, logger='intensity_analysis'):
            pipeline.print_summary()

        assert 'Interval Level:' in caplog.text
        assert '2000-2005' in caplog.text
        assert '2005-2015' in caplog.text
        assert 'Global Uniform Intensity (U): 2.67%' in caplog.text
        assert 'Category Level (Average):' in caplog.text
        assert 'Forest' in caplog.text
