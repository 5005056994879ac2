"""Regression models and diagnostics."""

from .design import Numeric, Categorical, Interaction, parse_terms, build_design_matrix
from .ols import ModelResult, TermEstimate, fit_ols, fit_formula, format_results
from .vif import VIF_THRESHOLD, variance_inflation_factors, flag_high_vif
from .config import REGRESSIONS, REFERENCE_LEVELS, RegressionSpec

__all__ = [
    "Numeric",
    "Categorical",
    "Interaction",
    "parse_terms",
    "build_design_matrix",
    "ModelResult",
    "TermEstimate",
    "fit_ols",
    "fit_formula",
    "format_results",
    "VIF_THRESHOLD",
    "variance_inflation_factors",
    "flag_high_vif",
    "REGRESSIONS",
    "REFERENCE_LEVELS",
    "RegressionSpec",
]
