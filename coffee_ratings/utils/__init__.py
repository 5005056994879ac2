"""Shared utilities for the Coffee Ratings pipeline."""

from .regression import (
    qr_least_squares,
    unscaled_covariance,
    r_squared,
    adjusted_r_squared,
    collinear_columns,
    significance_stars,
)
from .io import ensure_dir, read_table, save_parquet, save_csv

__all__ = [
    "qr_least_squares",
    "unscaled_covariance",
    "r_squared",
    "adjusted_r_squared",
    "collinear_columns",
    "significance_stars",
    "ensure_dir",
    "read_table",
    "save_parquet",
    "save_csv",
]
