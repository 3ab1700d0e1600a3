"""
BCGroundwater: A Python package for retrieving and analysing groundwater levels
of the B.C. Provincial Groundwater Observation Well Network.

This package downloads well observations from the B.C. Data Catalogue,
aggregates them to monthly and annual values, fills gaps in monthly series,
runs prewhitened Mann-Kendall trend tests and plots the results.
"""
from .retrieval import get_gwl
from .aggregation import monthly_values, annual_values
from .well_ts import make_well_ts, trim_cons_runs
from .zyp_test import zyp_trend_vector, gwl_zyp_test
from .plotting import gwl_area_plot, gwl_monthly_plot

__all__ = [
    'get_gwl',
    'monthly_values',
    'annual_values',
    'make_well_ts',
    'trim_cons_runs',
    'zyp_trend_vector',
    'gwl_zyp_test',
    'gwl_area_plot',
    'gwl_monthly_plot',
]
