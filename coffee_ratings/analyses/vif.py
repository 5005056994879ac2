"""
Variance inflation factors for a design matrix.

VIF_j = 1 / (1 - R²_j), where R²_j comes from regressing column j on all
other columns (intercept included). Values above VIF_THRESHOLD are the
usual multicollinearity flag; they are reported, never enforced.
"""

import numpy as np
import pandas as pd

from ..utils.regression import qr_least_squares, r_squared

VIF_THRESHOLD = 10.0


def variance_inflation_factors(
    design: pd.DataFrame,
    intercept: str = "Intercept",
) -> pd.Series:
    """
    Compute the VIF of every non-intercept column.

    Parameters
    ----------
    design : pd.DataFrame
        Full-rank design matrix, as built for the fit.
    intercept : str
        Name of the constant column, which gets no VIF.

    Returns
    -------
    pd.Series
        VIF per column; inf for a column perfectly explained by the
        others, NaN for a constant column.
    """
    X = design.to_numpy(dtype=float)
    vifs = {}

    for j, col in enumerate(design.columns):
        if col == intercept:
            continue
        others = np.delete(X, j, axis=1)
        if others.shape[1] == 0:
            vifs[col] = 1.0
            continue

        beta, _ = qr_least_squares(others, X[:, j])
        r2 = r_squared(X[:, j], others @ beta)
        if np.isnan(r2):
            vifs[col] = np.nan
        elif r2 >= 1.0:
            vifs[col] = np.inf
        else:
            vifs[col] = 1.0 / (1.0 - r2)

    return pd.Series(vifs, name="vif", dtype=float)


def flag_high_vif(vif: pd.Series, threshold: float = VIF_THRESHOLD) -> pd.Series:
    """Columns whose VIF exceeds the threshold."""
    return vif[vif > threshold]
