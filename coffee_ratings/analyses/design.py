"""
Model terms and design-matrix construction.

A model's right-hand side is a list of terms:

    Numeric("altitude_mean_meters")
    Categorical("species", reference="Arabica")
    Interaction(Numeric("altitude_mean_meters"), Categorical("species", "Arabica"))

or an R-style string such as ``"altitude_mean_meters * species"`` where
``a * b`` expands to ``a + b + a:b``. Categorical columns are always coded
as treatment contrasts against an explicit reference level; there is no
alphabetical default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from pandas.api.types import is_numeric_dtype

from ..exceptions import ModelSpecError

INTERCEPT = "Intercept"


@dataclass(frozen=True)
class Numeric:
    column: str

    @property
    def name(self) -> str:
        return self.column

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


@dataclass(frozen=True)
class Categorical:
    column: str
    reference: str

    @property
    def name(self) -> str:
        return self.column

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,)


@dataclass(frozen=True)
class Interaction:
    left: "Term"
    right: "Term"

    @property
    def name(self) -> str:
        return f"{self.left.name}:{self.right.name}"

    @property
    def columns(self) -> Tuple[str, ...]:
        return self.left.columns + tuple(
            c for c in self.right.columns if c not in self.left.columns
        )


Term = Union[Numeric, Categorical, Interaction]
TermLike = Union[Term, str]


# =============================================================================
# Formula Parsing
# =============================================================================

def split_formula(formula: str) -> Tuple[Optional[str], str]:
    """Split ``"y ~ rhs"`` into (response, rhs); response is None without ``~``."""
    if "~" not in formula:
        return None, formula.strip()
    lhs, rhs = formula.split("~", 1)
    return lhs.strip() or None, rhs.strip()


def resolve_term(
    name: str,
    reference_levels: Mapping[str, str],
    df: Optional[pd.DataFrame] = None,
) -> Term:
    """
    Turn a bare column name into a Numeric or Categorical term.

    A column listed in ``reference_levels`` is categorical. Any other column
    must be numeric in ``df`` (when given); a non-numeric column without a
    reference level is rejected rather than silently dummy-coded.
    """
    name = name.strip()
    if not name:
        raise ModelSpecError("Empty term in model specification")
    if name in reference_levels:
        return Categorical(name, reference_levels[name])
    if df is not None and name in df.columns and not is_numeric_dtype(df[name]):
        coerced = pd.to_numeric(df[name], errors="coerce")
        if coerced.notna().sum() < df[name].notna().sum():
            raise ModelSpecError(
                f"Column '{name}' is categorical; supply a reference level for it"
            )
    return Numeric(name)


def parse_terms(
    rhs: str,
    reference_levels: Optional[Mapping[str, str]] = None,
    df: Optional[pd.DataFrame] = None,
) -> List[Term]:
    """
    Parse an R-style right-hand side into terms.

    Supports ``+``, ``:`` (interaction only) and ``*`` (main effects plus
    interaction) between pairs of columns. Duplicate terms are dropped,
    keeping first-appearance order.
    """
    reference_levels = reference_levels or {}
    terms: List[Term] = []

    def add(term: Term) -> None:
        if term not in terms:
            terms.append(term)

    for chunk in rhs.split("+"):
        chunk = chunk.strip()
        if not chunk or chunk == "1":
            continue
        if "*" in chunk or ":" in chunk:
            sep = "*" if "*" in chunk else ":"
            parts = [p.strip() for p in chunk.split(sep)]
            if len(parts) != 2:
                raise ModelSpecError(f"Only pairwise interactions are supported: '{chunk}'")
            left = resolve_term(parts[0], reference_levels, df)
            right = resolve_term(parts[1], reference_levels, df)
            if sep == "*":
                add(left)
                add(right)
            add(Interaction(left, right))
        else:
            add(resolve_term(chunk, reference_levels, df))

    if not terms:
        raise ModelSpecError(f"No predictors in '{rhs}'")
    return terms


def normalize_terms(
    predictors: Union[str, Sequence[TermLike]],
    reference_levels: Optional[Mapping[str, str]] = None,
    df: Optional[pd.DataFrame] = None,
) -> List[Term]:
    """Accept a formula right-hand side or a mixed list of terms and names."""
    if isinstance(predictors, str):
        return parse_terms(predictors, reference_levels, df)
    terms: List[Term] = []
    for p in predictors:
        if isinstance(p, str):
            terms.extend(parse_terms(p, reference_levels, df))
        elif isinstance(p, (Numeric, Categorical, Interaction)):
            terms.append(p)
        else:
            raise ModelSpecError(f"Unsupported term: {p!r}")
    return list(dict.fromkeys(terms))


def referenced_columns(terms: Sequence[Term]) -> List[str]:
    """Raw columns a set of terms reads, in first-appearance order."""
    cols: List[str] = []
    for term in terms:
        for c in term.columns:
            if c not in cols:
                cols.append(c)
    return cols


def categorical_terms(terms: Sequence[Term]) -> List[Categorical]:
    """All categorical terms, including those nested in interactions."""
    found: List[Categorical] = []
    stack = list(terms)
    while stack:
        term = stack.pop(0)
        if isinstance(term, Categorical):
            if term not in found:
                found.append(term)
        elif isinstance(term, Interaction):
            stack.extend([term.left, term.right])
    return found


# =============================================================================
# Design Matrix
# =============================================================================

def category_levels(series: pd.Series) -> List:
    """Observed levels of a column: categorical order if set, else sorted."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        return list(series.cat.categories)
    return sorted(series.dropna().unique().tolist(), key=str)


def resolve_levels(df: pd.DataFrame, terms: Sequence[Term]) -> Dict[str, List]:
    """
    Levels per categorical column, taken from the full table.

    Levels are fixed before rows are dropped for missingness, so a level
    that loses all its rows yields an all-zero indicator column.
    """
    levels: Dict[str, List] = {}
    for term in categorical_terms(terms):
        observed = category_levels(df[term.column])
        if term.reference not in observed:
            raise ModelSpecError(
                f"Reference level '{term.reference}' not found in '{term.column}' "
                f"(levels: {observed})"
            )
        existing = levels.get(term.column)
        if existing is not None and existing[0] != term.reference:
            raise ModelSpecError(
                f"Conflicting reference levels for '{term.column}'"
            )
        levels[term.column] = [term.reference] + [l for l in observed if l != term.reference]
    return levels


def _expand(term: Term, data: pd.DataFrame, levels: Mapping[str, List]) -> pd.DataFrame:
    if isinstance(term, Numeric):
        return pd.DataFrame({term.column: data[term.column].astype(float)}, index=data.index)

    if isinstance(term, Categorical):
        cols = {
            f"{term.column}[T.{level}]": (data[term.column] == level).astype(float)
            for level in levels[term.column][1:]
        }
        return pd.DataFrame(cols, index=data.index)

    left = _expand(term.left, data, levels)
    right = _expand(term.right, data, levels)
    cols = {
        f"{l}:{r}": left[l] * right[r]
        for l in left.columns
        for r in right.columns
    }
    return pd.DataFrame(cols, index=data.index)


def build_design_matrix(
    data: pd.DataFrame,
    terms: Sequence[Term],
    levels: Mapping[str, List],
    intercept: bool = True,
) -> pd.DataFrame:
    """
    Expand terms into a dense float design matrix aligned with ``data``.

    Column names follow the ``column[T.level]`` convention for indicators
    and ``a:b`` for interaction products.
    """
    blocks = []
    if intercept:
        blocks.append(pd.DataFrame({INTERCEPT: 1.0}, index=data.index))
    for term in terms:
        blocks.append(_expand(term, data, levels))
    design = pd.concat(blocks, axis=1)
    return design.loc[:, ~design.columns.duplicated()]
