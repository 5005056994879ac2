"""
Group-level summaries of cleaned rating records.

Computes:
- Ratings count and mean flavor per country
- Species distribution (count and percent)
- Generic count/mean tables for any grouping column
- Descriptive statistics for the numeric rating columns
"""

from typing import List, Optional
import logging

import pandas as pd

from ..config import NUMERIC_COLUMNS

logger = logging.getLogger(__name__)


def summarize_by_group(
    df: pd.DataFrame,
    group_col: str,
    value_col: str,
) -> pd.DataFrame:
    """
    Row count and mean of ``value_col`` per level of ``group_col``.

    Rows with a null group are excluded; null values are skipped within a
    group, so a group's mean covers only its non-null values.

    Returns
    -------
    pd.DataFrame
        Indexed by group with columns ``count`` and ``mean_<value_col>``,
        sorted by descending count then group name.
    """
    mask = df[group_col].notna()
    subset = df.loc[mask, [group_col]].copy()
    subset["_value"] = pd.to_numeric(df.loc[mask, value_col], errors="coerce").to_numpy()
    grouped = subset.groupby(group_col, sort=True, observed=True)["_value"]

    summary = pd.DataFrame({
        "count": grouped.size(),
        f"mean_{value_col}": grouped.mean(),
    })
    summary.index.name = group_col
    summary["count"] = summary["count"].astype(int)
    return summary.sort_values("count", ascending=False, kind="mergesort")


def summarize_by_country(df: pd.DataFrame) -> pd.DataFrame:
    """Ratings count and mean flavor per canonical country."""
    summary = summarize_by_group(df, "country_of_origin", "flavor")
    logger.info(
        f"Country summary: {len(summary)} countries, "
        f"{summary['count'].sum():,} rated lots"
    )
    return summary


def species_distribution(df: pd.DataFrame) -> pd.DataFrame:
    """
    Count and percentage of rows per species.

    Percentages are over rows with a non-null species and sum to 100.
    """
    counts = df["species"].value_counts(dropna=True)
    dist = pd.DataFrame({
        "count": counts.astype(int),
        "percent": 100.0 * counts / counts.sum(),
    })
    dist.index.name = "species"
    return dist


def summarize_ratings(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
) -> pd.DataFrame:
    """Count, mean, std, min, median and max per numeric column."""
    if columns is None:
        columns = [c for c in NUMERIC_COLUMNS if c in df.columns]
    num = df[columns].apply(pd.to_numeric, errors="coerce")
    out = num.agg(["count", "mean", "std", "min", "median", "max"]).T
    out["count"] = out["count"].astype(int)
    out.index.name = "column"
    return out


def top_countries(summary: pd.DataFrame, n: int = 15) -> pd.DataFrame:
    """The ``n`` most-rated countries from a country summary."""
    return summary.head(n)
