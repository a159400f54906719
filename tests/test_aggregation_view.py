"""Tests for average and per-interval views of a run."""

import pytest

from intensity_analysis.core.aggregation_view import (
    AVERAGE_SCOPE,
    category_view,
    interval_series,
    scope_options,
)
from intensity_analysis.core.exceptions import EmptyAnalysisRun, UnknownInterval
from intensity_analysis.core.intensity_pipeline import process_interval
from intensity_analysis.core.models import AnalysisRun, CategoryStat, Interval, IntervalResult
from intensity_analysis.core.uniform_intensity import compute_uniform_intensity


@pytest.fixture
def run(scheme, histograms):
    results = tuple(
        process_interval(hist, Interval(*years), scheme)
        for years, hist in sorted(histograms.items())
    )
    return AnalysisRun(results=results, global_uniform_intensity=compute_uniform_intensity(results))


class TestIntervalSeries:

    def test_labels_and_reference(self, run):
        series = interval_series(run)
        assert series.labels == ['2000-2005', '2005-2015']
        assert series.intensities[0] == pytest.approx(6.0)
        assert series.uniform_line == [run.global_uniform_intensity] * 2

    def test_frame(self, run):
        frame = interval_series(run).to_frame()
        assert list(frame['interval']) == ['2000-2005', '2005-2015']
        assert list(frame.columns) == ['interval', 'intensity_pct_per_yr', 'uniform_intensity']


class TestCategoryView:

    def test_interval_scope_uses_interval_stats(self, run, scheme):
        view = category_view(run, scheme, '2000-2005')
        assert not view.is_average
        assert view.reference_intensity == pytest.approx(6.0)
        gains = dict(zip(view.class_ids, view.gains))
        losses = dict(zip(view.class_ids, view.losses))
        assert gains[2] == pytest.approx(12.0)
        assert losses[1] == pytest.approx(7.5)

    def test_interval_scope_accepts_interval(self, run, scheme):
        view = category_view(run, scheme, Interval(2005, 2015))
        assert view.scope == '2005-2015'
        assert view.reference_intensity == pytest.approx(run.get('2005-2015').interval_intensity)

    def test_average_scope(self, run, scheme):
        view = category_view(run, scheme, AVERAGE_SCOPE)
        assert view.is_average
        assert view.reference_intensity == pytest.approx(run.global_uniform_intensity)
        for class_id, gain, loss in zip(view.class_ids, view.gains, view.losses):
            per_interval = [r.stats_by_class()[class_id] for r in run]
            assert gain == pytest.approx(sum(s.gain_intensity for s in per_interval) / 2)
            assert loss == pytest.approx(sum(s.loss_intensity for s in per_interval) / 2)

    def test_average_is_unweighted_mean(self, scheme):
        # Interval sizes differ by a factor of 100, the mean ignores that
        small = IntervalResult(Interval(2000, 2001), 10, 5, 5, 50.0,
                               (CategoryStat(1, gain_intensity=10.0, loss_intensity=2.0),))
        large = IntervalResult(Interval(2001, 2002), 1000, 990, 10, 1.0,
                               (CategoryStat(1, gain_intensity=30.0, loss_intensity=4.0),))
        run = AnalysisRun((small, large), global_uniform_intensity=1.5)
        view = category_view(run, scheme)
        assert view.class_ids == [1]
        assert view.gains == [pytest.approx(20.0)]
        assert view.losses == [pytest.approx(3.0)]

    def test_average_over_intervals_holding_the_class(self, scheme):
        first = IntervalResult(Interval(2000, 2001), 10, 5, 5, 50.0,
                               (CategoryStat(1, 10.0, 2.0), CategoryStat(2, 6.0, 6.0)))
        second = IntervalResult(Interval(2001, 2002), 10, 5, 5, 50.0,
                                (CategoryStat(1, 20.0, 4.0),))
        view = category_view(AnalysisRun((first, second), 50.0), scheme)
        gains = dict(zip(view.class_ids, view.gains))
        assert gains == {1: pytest.approx(15.0), 2: pytest.approx(6.0)}

    def test_category_axis_follows_scheme(self, run, scheme):
        view = category_view(run, scheme)
        assert view.class_ids == scheme.ids
        assert view.class_names == scheme.names

    def test_unknown_interval(self, run, scheme):
        with pytest.raises(UnknownInterval) as exc:
            category_view(run, scheme, '1990-1995')
        assert exc.value.label == '1990-1995'
        assert exc.value.available == ['2000-2005', '2005-2015']

    def test_empty_run(self, scheme):
        with pytest.raises(EmptyAnalysisRun):
            category_view(AnalysisRun((), 0.0), scheme)

    def test_labels_for_presentation(self, run, scheme):
        average = category_view(run, scheme)
        single = category_view(run, scheme, '2000-2005')
        assert average.title == 'Category Level (Average)'
        assert average.reference_label == 'Black dashed line = Uniform Intensity (U)'
        assert single.title == 'Category Level (2000-2005)'
        assert single.reference_label == 'Black dashed line = Interval Intensity (2000-2005)'

    def test_frame(self, run, scheme):
        frame = category_view(run, scheme, '2000-2005').to_frame()
        assert list(frame['class_name']) == ['Cropland', 'Forest', 'Water']
        assert frame['reference_intensity'].tolist() == pytest.approx([6.0] * 3)


class TestScopeOptions:

    def test_average_first(self, run):
        assert scope_options(run) == [AVERAGE_SCOPE, '2000-2005', '2005-2015']

    def test_empty_run(self):
        with pytest.raises(EmptyAnalysisRun):
            interval_series(AnalysisRun((), 0.0))
