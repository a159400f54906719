"""Shared fixtures for the Intensity Analysis tests."""

import pandas as pd
import pytest

from intensity_analysis.core.class_scheme import ClassScheme, LandCoverClass
from intensity_analysis.core.models import Interval
from intensity_analysis.core.providers import InMemoryHistogrammer


@pytest.fixture
def scheme() -> ClassScheme:
    """Three-class scheme used by the worked scenarios."""
    return ClassScheme([
        LandCoverClass(1, 'Cropland'),
        LandCoverClass(2, 'Forest'),
        LandCoverClass(3, 'Water'),
    ])


@pytest.fixture
def scenario_histogram() -> dict:
    """class1->class1=50, class1->class2=30, class2->class2=20."""
    return {101: 50, 102: 30, 202: 20}


@pytest.fixture
def config() -> dict:
    return {
        'logging': {'level': 'INFO'},
        'classes': [
            {'id': 1, 'name': 'Cropland', 'code': 'CRP'},
            {'id': 2, 'name': 'Forest', 'code': 'FST'},
            {'id': 3, 'name': 'Water', 'code': 'WTR'},
        ],
        'analysis': {
            'years': [2000, 2005, 2015],
            'scale': 1000,
            'min_scale': 250,
            'max_scale': 10000,
            'average_label': 'Average (All Years)',
        },
        'regions': {
            'column': 'LAB',
            'column_candidates': ['label', 'name', 'acronym', 'region', 'id'],
            'targets': ['EAF', 'WAF'],
            'whole_label': 'Whole Africa',
        },
        'compute': {'num_workers': 2},
    }


@pytest.fixture
def histograms() -> dict:
    """Two intervals: 2000-2005 and 2005-2015."""
    return {
        (2000, 2005): {101: 50, 102: 30, 202: 20},
        (2005, 2015): {101: 40, 102: 10, 201: 20, 202: 100, 303: 30},
    }


@pytest.fixture
def in_memory(histograms) -> InMemoryHistogrammer:
    return InMemoryHistogrammer(histograms)


@pytest.fixture
def transition_frame() -> pd.DataFrame:
    """Transition table for two regions and two intervals, as exported."""
    rows = []
    data = {
        'EAF': {
            (2000, 2005): {(1, 1): 50, (1, 2): 30, (2, 2): 20},
            (2005, 2015): {(1, 1): 40, (1, 2): 10, (2, 1): 20, (2, 2): 100},
        },
        'WAF': {
            (2000, 2005): {(1, 1): 10, (3, 3): 40, (3, 1): 10},
            (2005, 2015): {(1, 1): 20, (3, 3): 40},
        },
    }
    for region, intervals in data.items():
        for (yi, yf), transitions in intervals.items():
            for (f, t), px in transitions.items():
                rows.append({
                    'LAB': region, 'Year Initial': yi, 'Year Final': yf,
                    'From Class': f, 'To Class': t, 'Pixels': px,
                })
    return pd.DataFrame(rows)


@pytest.fixture
def first_interval() -> Interval:
    return Interval(2000, 2005)
