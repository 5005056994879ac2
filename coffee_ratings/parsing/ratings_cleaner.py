"""
Cleaner for the raw coffee ratings table.

Turns the 43-column source table into the analysis table:
- Project to the 20 analysis columns (others are discarded)
- Drop failed entries with total_cup_points == 0
- Coerce numeric columns; malformed values become null
- Null out implausible altitudes (> max_altitude_meters)
- Derive days_to_expiration from the two dates
- Canonicalize country names, then attach the World Bank region

Every step returns a new frame; the input is never modified.
"""

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd

from ..config import CLEANING_CONFIG, DERIVED_COLUMNS, NUMERIC_COLUMNS, CleaningConfig
from ..exceptions import SchemaError
from .region_lookup import assign_region
from .string_normalizer import days_between, normalize_country_series

logger = logging.getLogger(__name__)


def check_schema(raw: pd.DataFrame, config: CleaningConfig = CLEANING_CONFIG) -> None:
    """Raise SchemaError listing every required column absent from ``raw``."""
    missing = set(config.columns) - set(raw.columns)
    if missing:
        raise SchemaError(missing)


def select_columns(raw: pd.DataFrame, config: CleaningConfig = CLEANING_CONFIG) -> pd.DataFrame:
    """Keep exactly the analysis columns, in configured order."""
    check_schema(raw, config)
    return raw.loc[:, config.columns].copy()


def coerce_numeric(df: pd.DataFrame) -> pd.DataFrame:
    """Numeric columns to float; unparseable entries become NaN."""
    out = df.copy()
    for col in NUMERIC_COLUMNS:
        if col in out.columns:
            out[col] = pd.to_numeric(out[col], errors="coerce").astype(float)
    return out


def drop_failed_entries(df: pd.DataFrame, config: CleaningConfig = CLEANING_CONFIG) -> pd.DataFrame:
    """Remove rows whose total_cup_points equals the failed-entry marker."""
    failed = df["total_cup_points"] == config.invalid_total_cup_points
    if failed.any():
        logger.info(f"Dropping {int(failed.sum())} rows with total_cup_points == "
                    f"{config.invalid_total_cup_points:g}")
    return df.loc[~failed].copy()


def null_implausible_altitude(
    df: pd.DataFrame,
    config: CleaningConfig = CLEANING_CONFIG,
) -> pd.DataFrame:
    """Set altitude_mean_meters above the threshold to NaN; rows are kept."""
    out = df.copy()
    too_high = out["altitude_mean_meters"] > config.max_altitude_meters
    if too_high.any():
        logger.info(f"Nulling {int(too_high.sum())} altitudes above "
                    f"{config.max_altitude_meters:,.0f} m")
    out.loc[too_high, "altitude_mean_meters"] = np.nan
    return out


def add_days_to_expiration(df: pd.DataFrame) -> pd.DataFrame:
    """days_to_expiration = expiration - grading_date, in whole days."""
    out = df.copy()
    out["days_to_expiration"] = days_between(out["grading_date"], out["expiration"])
    unparsed = out["days_to_expiration"].isna().sum()
    if unparsed:
        logger.warning(f"{unparsed} rows with unparseable grading/expiration dates")
    return out


def normalize_countries(
    df: pd.DataFrame,
    synonyms: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """Collapse country spellings to canonical labels."""
    out = df.copy()
    before = out["country_of_origin"].nunique()
    out["country_of_origin"] = normalize_country_series(out["country_of_origin"], synonyms)
    after = out["country_of_origin"].nunique()
    logger.debug(f"Country labels: {before} raw -> {after} canonical")
    return out


def clean(
    raw: pd.DataFrame,
    config: Optional[CleaningConfig] = None,
    regions: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """
    Produce the analysis table from the raw ratings table.

    Parameters
    ----------
    raw : pd.DataFrame
        Source table; only the configured columns are required.
    config : CleaningConfig, optional
        Thresholds and synonym table (defaults to CLEANING_CONFIG).
    regions : Dict[str, str], optional
        Country -> region lookup (defaults to WORLD_BANK_REGIONS).

    Returns
    -------
    pd.DataFrame
        Cleaned table with a fresh RangeIndex.

    Raises
    ------
    SchemaError
        If any configured column is absent from ``raw``.
    """
    if config is None:
        config = CLEANING_CONFIG

    df = select_columns(raw, config)
    df = coerce_numeric(df)
    df = drop_failed_entries(df, config)
    df = null_implausible_altitude(df, config)
    df = add_days_to_expiration(df)
    df = normalize_countries(df, config.country_synonyms)
    df = assign_region(df, regions)

    df = df.loc[:, list(config.columns) + DERIVED_COLUMNS].reset_index(drop=True)
    logger.info(f"Cleaned table: {len(df):,} rows x {df.shape[1]} columns "
                f"(from {len(raw):,} raw rows)")
    return df
