"""Aggregation utilities: group summaries and correlations."""

from .country_summary import (
    summarize_by_group,
    summarize_by_country,
    species_distribution,
    summarize_ratings,
    top_countries,
)
from .correlation import correlation_matrix, pairwise_counts, strongest_pairs

__all__ = [
    "summarize_by_group",
    "summarize_by_country",
    "species_distribution",
    "summarize_ratings",
    "top_countries",
    "correlation_matrix",
    "pairwise_counts",
    "strongest_pairs",
]
