"""
Stage 2: Data Cleaning

Turns the raw table into the analysis table.

Operations:
    - Project to the 20 analysis columns
    - Drop failed entries (total_cup_points == 0)
    - Null altitudes above 8,000 m
    - Derive days_to_expiration
    - Canonicalize country names and attach World Bank regions

A missing required column aborts the pipeline: no partial table is written.
"""

import logging
from typing import Optional

import pandas as pd

from ..config import CLEANED_RATINGS_FILENAME, PipelineConfig

logger = logging.getLogger(__name__)


def run_clean(
    raw: Optional[pd.DataFrame] = None,
    cfg: Optional[PipelineConfig] = None,
    save: bool = True,
) -> pd.DataFrame:
    """
    Run the data cleaning stage.

    Args:
        raw: Raw table; loaded through stage 1 when None
        cfg: Pipeline configuration
        save: Write the cleaned table to the staging directory

    Returns:
        pd.DataFrame: Cleaned ratings table

    Raises:
        SchemaError: If the raw table lacks a required column
    """
    from ..parsing import clean
    from ..utils.io import save_parquet

    cfg = cfg or PipelineConfig()

    if raw is None:
        from .stage1_load import run_load
        raw = run_load(cfg)

    logger.info("=" * 60)
    logger.info("STAGE 2: DATA CLEANING")
    logger.info("=" * 60)

    cleaned = clean(raw, config=cfg.cleaning_config())

    if save:
        save_parquet(cleaned, cfg.staging_path / CLEANED_RATINGS_FILENAME)

    return cleaned


def load_cleaned(cfg: Optional[PipelineConfig] = None) -> pd.DataFrame:
    """Read the staged cleaned table, running stages 1-2 if it is absent."""
    from ..utils.io import read_table

    cfg = cfg or PipelineConfig()
    path = cfg.staging_path / CLEANED_RATINGS_FILENAME
    if path.exists():
        logger.info(f"Using staged cleaned table {path.name}")
        return read_table(path)

    logger.info("No staged cleaned table found, running load and clean")
    return run_clean(cfg=cfg)
