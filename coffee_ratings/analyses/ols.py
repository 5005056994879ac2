"""
Ordinary least squares with explicit categorical baselines.

Fits ``response ~ terms`` on the complete cases of the columns the model
uses, and reports classical standard errors, two-sided t-test p-values,
R², adjusted R² and variance inflation factors.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from ..exceptions import InsufficientDataError, ModelSpecError, RankDeficiencyError
from ..utils.regression import (
    adjusted_r_squared,
    collinear_columns,
    qr_least_squares,
    r_squared,
    significance_stars,
    unscaled_covariance,
)
from .design import (
    INTERCEPT,
    Term,
    TermLike,
    build_design_matrix,
    normalize_terms,
    referenced_columns,
    resolve_levels,
    split_formula,
)
from .vif import variance_inflation_factors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TermEstimate:
    """One row of a coefficient table."""
    name: str
    estimate: float
    std_error: float
    t_stat: float
    p_value: float


@dataclass(frozen=True, eq=False)
class ModelResult:
    """Immutable result of one OLS fit."""
    label: str
    response: str
    formula: str
    terms: Tuple[TermEstimate, ...]
    n_obs: int
    df_resid: int
    r_squared: float
    adj_r_squared: float
    sigma: float
    fitted: pd.Series = field(repr=False)
    residuals: pd.Series = field(repr=False)
    vif: pd.Series = field(repr=False)

    @property
    def names(self) -> List[str]:
        return [t.name for t in self.terms]

    @property
    def params(self) -> pd.Series:
        return pd.Series([t.estimate for t in self.terms], index=self.names, name="estimate")

    @property
    def bse(self) -> pd.Series:
        return pd.Series([t.std_error for t in self.terms], index=self.names, name="std_error")

    @property
    def pvalues(self) -> pd.Series:
        return pd.Series([t.p_value for t in self.terms], index=self.names, name="p_value")

    def term(self, name: str) -> TermEstimate:
        for t in self.terms:
            if t.name == name:
                return t
        raise KeyError(f"No term '{name}' in {self.label} (terms: {self.names})")

    def conf_int(self, alpha: float = 0.05) -> pd.DataFrame:
        """Two-sided (1 - alpha) confidence intervals per term."""
        q = stats.t.ppf(1 - alpha / 2, df=self.df_resid)
        return pd.DataFrame(
            {
                "lower": self.params - q * self.bse,
                "upper": self.params + q * self.bse,
            }
        )

    def coef_table(self) -> pd.DataFrame:
        """Coefficient table with one row per term."""
        table = pd.DataFrame(
            [
                {
                    "term": t.name,
                    "estimate": t.estimate,
                    "std_error": t.std_error,
                    "t_stat": t.t_stat,
                    "p_value": t.p_value,
                }
                for t in self.terms
            ]
        )
        table["vif"] = table["term"].map(self.vif)
        return table

    def to_records(self) -> List[Dict]:
        """One flat record per term, for CSV export."""
        records = []
        for row in self.coef_table().to_dict("records"):
            row.update(
                {
                    "model": self.label,
                    "formula": self.formula,
                    "n": self.n_obs,
                    "r2": self.r_squared,
                    "adj_r2": self.adj_r_squared,
                }
            )
            records.append(row)
        return records


def _describe(response: str, terms: Sequence[Term]) -> str:
    return f"{response} ~ " + " + ".join(t.name for t in terms)


def fit_ols(
    df: pd.DataFrame,
    response: str,
    predictors: Union[str, Sequence[TermLike]],
    reference_levels: Optional[Mapping[str, str]] = None,
    label: Optional[str] = None,
) -> ModelResult:
    """
    Fit an OLS regression.

    Parameters
    ----------
    df : pd.DataFrame
        Input table; never modified.
    response : str
        Response column.
    predictors : str or list
        Formula right-hand side (``"a * b + c"``) or a list of terms
        (:class:`Numeric`, :class:`Categorical`, :class:`Interaction`) and
        column names.
    reference_levels : Mapping[str, str], optional
        Baseline level for every categorical column named by string.
    label : str, optional
        Name used in logs and output tables.

    Returns
    -------
    ModelResult

    Raises
    ------
    ModelSpecError
        Unknown column, or a categorical without a valid reference level.
    InsufficientDataError
        Residual degrees of freedom n - p <= 0.
    RankDeficiencyError
        Design matrix not of full column rank.
    """
    reference_levels = dict(reference_levels or {})
    terms = normalize_terms(predictors, reference_levels, df)
    formula = _describe(response, terms)
    label = label or formula

    used = [response] + [c for c in referenced_columns(terms) if c != response]
    missing = [c for c in used if c not in df.columns]
    if missing:
        raise ModelSpecError(f"{label}: unknown columns {missing}")

    levels = resolve_levels(df, terms)

    # Complete cases for this model only
    data = df[used].copy()
    numeric_cols = {response} | {
        c for t in terms for c in t.columns if c not in levels
    }
    for col in numeric_cols:
        data[col] = pd.to_numeric(data[col], errors="coerce")
    data = data.dropna()

    design = build_design_matrix(data, terms, levels)
    n, p = design.shape
    logger.info(f"{label}: n={n:,}, p={p}, dropped {len(df) - n:,} incomplete rows")

    if n - p <= 0:
        raise InsufficientDataError(n, p)

    X = design.to_numpy(dtype=float)
    y = data[response].to_numpy(dtype=float)

    rank = np.linalg.matrix_rank(X)
    if rank < p:
        raise RankDeficiencyError(rank, p, collinear_columns(design))

    beta, R = qr_least_squares(X, y)
    y_hat = X @ beta
    resid = y - y_hat
    df_resid = n - p

    sigma2 = float(resid @ resid) / df_resid
    cov = sigma2 * unscaled_covariance(R)
    se = np.sqrt(np.clip(np.diag(cov), 0.0, None))

    with np.errstate(divide="ignore", invalid="ignore"):
        t_stats = beta / se
    p_values = 2 * stats.t.sf(np.abs(t_stats), df=df_resid)

    r2 = r_squared(y, y_hat)
    adj_r2 = adjusted_r_squared(r2, n, p, has_intercept=INTERCEPT in design.columns)

    estimates = tuple(
        TermEstimate(
            name=name,
            estimate=float(beta[i]),
            std_error=float(se[i]),
            t_stat=float(t_stats[i]),
            p_value=float(p_values[i]),
        )
        for i, name in enumerate(design.columns)
    )

    return ModelResult(
        label=label,
        response=response,
        formula=formula,
        terms=estimates,
        n_obs=n,
        df_resid=df_resid,
        r_squared=r2,
        adj_r_squared=adj_r2,
        sigma=float(np.sqrt(sigma2)),
        fitted=pd.Series(y_hat, index=data.index, name="fitted"),
        residuals=pd.Series(resid, index=data.index, name="residual"),
        vif=variance_inflation_factors(design),
    )


def fit_formula(
    df: pd.DataFrame,
    formula: str,
    reference_levels: Optional[Mapping[str, str]] = None,
    label: Optional[str] = None,
) -> ModelResult:
    """Fit ``"response ~ rhs"``; see :func:`fit_ols`."""
    response, rhs = split_formula(formula)
    if response is None:
        raise ModelSpecError(f"Formula has no response: '{formula}'")
    return fit_ols(df, response, rhs, reference_levels, label=label)


def format_results(result: ModelResult) -> str:
    """Format regression results for display."""
    lines = [
        f"\n{'=' * 78}",
        f"{result.label}: {result.formula}",
        f"{'=' * 78}",
        f"N = {result.n_obs:,}   R² = {result.r_squared:.4f}   "
        f"Adj. R² = {result.adj_r_squared:.4f}",
        "-" * 78,
        f"{'Variable':<40} {'Coef':>10} {'SE':>10} {'t':>8} {'p':>8}",
        "-" * 78,
    ]

    for t in result.terms:
        stars = significance_stars(t.p_value)
        lines.append(
            f"{t.name:<40} {t.estimate:>10.4f} {t.std_error:>10.4f} "
            f"{t.t_stat:>8.2f} {t.p_value:>7.4f}{stars}"
        )

    lines.append("-" * 78)
    return "\n".join(lines)
