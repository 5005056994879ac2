"""
Stage 3: Aggregation

Descriptive summaries of the cleaned table:
    - Ratings count and mean flavor per country
    - Species distribution
    - Mean flavor by region and by processing method
    - Summary statistics of the numeric columns
    - Pairwise-complete correlation matrix of the rating columns
"""

import logging
from typing import Optional

import pandas as pd

from ..config import PipelineConfig

logger = logging.getLogger(__name__)


def run_aggregate(
    cleaned: Optional[pd.DataFrame] = None,
    cfg: Optional[PipelineConfig] = None,
) -> dict:
    """
    Run the aggregation stage.

    Returns:
        dict: Aggregate tables keyed by name
    """
    from ..aggregation import (
        correlation_matrix,
        pairwise_counts,
        species_distribution,
        strongest_pairs,
        summarize_by_country,
        summarize_by_group,
        summarize_ratings,
    )

    cfg = cfg or PipelineConfig()

    if cleaned is None:
        from .stage2_clean import load_cleaned
        cleaned = load_cleaned(cfg)

    logger.info("=" * 60)
    logger.info("STAGE 3: AGGREGATION")
    logger.info("=" * 60)

    corr = correlation_matrix(cleaned, min_periods=cfg.correlation_min_periods)

    results = {
        "country_summary": summarize_by_country(cleaned),
        "species": species_distribution(cleaned),
        "region_summary": summarize_by_group(cleaned, "region", "flavor"),
        "processing_summary": summarize_by_group(cleaned, "processing_method", "flavor"),
        "ratings_summary": summarize_ratings(cleaned),
        "correlation": corr,
        "pairwise_counts": pairwise_counts(cleaned),
        "strongest_pairs": strongest_pairs(corr),
    }

    for species, row in results["species"].iterrows():
        logger.info(f"  {species}: {int(row['count']):,} lots ({row['percent']:.1f}%)")
    top = results["strongest_pairs"].head(3)
    for _, pair in top.iterrows():
        logger.info(f"  r({pair['column_a']}, {pair['column_b']}) = {pair['r']:.3f}")

    return results
