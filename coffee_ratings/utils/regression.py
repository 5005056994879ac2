"""
Shared regression utilities.

Least-squares building blocks used by both the OLS fitter and the
variance-inflation diagnostics.
"""

from typing import List, Optional, Tuple
import numpy as np
import pandas as pd
from scipy.linalg import solve_triangular


def qr_least_squares(
    X: np.ndarray,
    y: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve min ||y - X b|| through the reduced QR decomposition.

    Assumes X has full column rank; callers check rank first.

    Parameters
    ----------
    X : np.ndarray
        Design matrix (n, p).
    y : np.ndarray
        Response (n,).

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (beta, R) where R is the (p, p) upper-triangular factor.
    """
    Q, R = np.linalg.qr(X, mode="reduced")
    beta = solve_triangular(R, Q.T @ y, lower=False)
    return beta, R


def unscaled_covariance(R: np.ndarray) -> np.ndarray:
    """(X'X)^-1 from the triangular factor of X."""
    R_inv = solve_triangular(R, np.eye(R.shape[0]), lower=False)
    return R_inv @ R_inv.T


def r_squared(y: np.ndarray, y_hat: np.ndarray) -> float:
    """Centered coefficient of determination; NaN for a constant response."""
    ss_res = np.sum((y - y_hat) ** 2)
    ss_tot = np.sum((y - np.mean(y)) ** 2)
    if ss_tot == 0:
        return float("nan")
    return float(1.0 - ss_res / ss_tot)


def adjusted_r_squared(r2: float, n: int, p: int, has_intercept: bool = True) -> float:
    """Adjusted R² for n observations and p estimated parameters."""
    df_total = n - 1 if has_intercept else n
    return float(1.0 - (1.0 - r2) * df_total / (n - p))


def collinear_columns(design: pd.DataFrame, tol: float = 1e-12) -> List[str]:
    """
    Name columns that make a design matrix rank deficient in obvious ways.

    Reports all-zero columns and columns that duplicate an earlier one.
    Subtler linear dependence is not attributed to a column.
    """
    suspects = []
    X = design.to_numpy(dtype=float)
    for j, col in enumerate(design.columns):
        if np.all(np.abs(X[:, j]) <= tol):
            suspects.append(col)
            continue
        for k in range(j):
            if np.allclose(X[:, j], X[:, k], rtol=0.0, atol=tol):
                suspects.append(f"{col} == {design.columns[k]}")
                break
    return suspects


def significance_stars(p: Optional[float]) -> str:
    """Conventional stars: *** p<0.01, ** p<0.05, * p<0.10."""
    if p is None or np.isnan(p):
        return ""
    if p < 0.01:
        return "***"
    if p < 0.05:
        return "**"
    if p < 0.10:
        return "*"
    return ""
