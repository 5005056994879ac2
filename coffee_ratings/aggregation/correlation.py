"""
Pairwise-complete correlation of rating columns.

Each cell uses every row where both of its columns are non-null, so a
sparse column only shrinks the sample of the cells it takes part in.
"""

from typing import List, Optional
import logging

import numpy as np
import pandas as pd

from ..config import RATING_COLUMNS

logger = logging.getLogger(__name__)


def _numeric_block(df: pd.DataFrame, columns: Optional[List[str]]) -> pd.DataFrame:
    if columns is None:
        columns = [c for c in RATING_COLUMNS if c in df.columns]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not in table: {missing}")
    return df[columns].apply(pd.to_numeric, errors="coerce").astype(float)


def correlation_matrix(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
    min_periods: int = 1,
) -> pd.DataFrame:
    """
    Pearson correlation for every pair of ``columns``.

    Parameters
    ----------
    df : pd.DataFrame
        Cleaned ratings table.
    columns : List[str], optional
        Columns to correlate (defaults to the sensory scores plus
        total_cup_points).
    min_periods : int
        Minimum jointly non-null rows for a cell; fewer gives NaN.

    Returns
    -------
    pd.DataFrame
        Symmetric matrix; the diagonal is 1.0 for every column with
        nonzero variance.
    """
    block = _numeric_block(df, columns)
    corr = block.corr(method="pearson", min_periods=max(min_periods, 2))

    # Guard against asymmetric round-off
    values = corr.to_numpy()
    values = np.where(np.isnan(values), values.T, (values + values.T) / 2.0)
    varying = (block.std() > 0).to_numpy()
    diag = np.diag_indices_from(values)
    values[diag] = np.where(varying, 1.0, np.nan)
    corr = pd.DataFrame(values, index=corr.index, columns=corr.columns)

    logger.info(f"Correlation matrix over {len(corr)} columns, {len(block):,} rows")
    return corr


def pairwise_counts(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
) -> pd.DataFrame:
    """Number of rows where both columns of each pair are non-null."""
    block = _numeric_block(df, columns)
    present = block.notna().astype(int)
    counts = present.T @ present
    return counts.astype(int)


def strongest_pairs(corr: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """The ``n`` off-diagonal pairs with the largest absolute correlation."""
    upper = corr.where(np.triu(np.ones(corr.shape, dtype=bool), k=1))
    pairs = upper.stack().rename("r").reset_index()
    pairs.columns = ["column_a", "column_b", "r"]
    pairs = pairs.dropna(subset=["r"])
    pairs["abs_r"] = pairs["r"].abs()
    return (
        pairs.sort_values("abs_r", ascending=False, kind="mergesort")
        .head(n)
        .drop(columns="abs_r")
        .reset_index(drop=True)
    )
