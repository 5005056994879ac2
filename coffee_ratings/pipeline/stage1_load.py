"""
Stage 1: Data Load

Reads the raw coffee ratings table.

Sources:
    - A local CSV or parquet file (``input_path``), or
    - The published TidyTuesday CSV, downloaded once into data/raw/
      and recorded in data/raw/manifest.jsonl
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config import PipelineConfig

logger = logging.getLogger(__name__)


def run_load(cfg: Optional[PipelineConfig] = None) -> pd.DataFrame:
    """
    Run the data load stage.

    Returns:
        pd.DataFrame: Raw ratings table
    """
    from ..download import load_raw_ratings

    cfg = cfg or PipelineConfig()

    logger.info("=" * 60)
    logger.info("STAGE 1: DATA LOAD")
    logger.info("=" * 60)

    path = Path(cfg.input_path) if cfg.input_path else None
    raw = load_raw_ratings(path=path, url=cfg.source_url, force=cfg.force_download)

    logger.info(f"Raw table: {len(raw):,} rows x {raw.shape[1]} columns")
    return raw
