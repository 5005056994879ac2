"""Exception hierarchy for the Coffee Ratings pipeline."""

from typing import Iterable, Optional


class CoffeeRatingsError(Exception):
    """Base class for all pipeline errors."""


class SchemaError(CoffeeRatingsError):
    """Required input columns are absent from the raw table."""

    def __init__(self, missing: Iterable[str]):
        self.missing = sorted(missing)
        super().__init__(
            f"Input table is missing required columns: {', '.join(self.missing)}"
        )


class ModelSpecError(CoffeeRatingsError, ValueError):
    """A model specification refers to unknown columns or levels."""


class ModelFitError(CoffeeRatingsError):
    """A single model fit could not be estimated."""


class RankDeficiencyError(ModelFitError):
    """The design matrix is not of full column rank."""

    def __init__(self, rank: int, n_columns: int, suspects: Optional[Iterable[str]] = None):
        self.rank = rank
        self.n_columns = n_columns
        self.suspects = list(suspects or [])
        msg = f"Design matrix has rank {rank} < {n_columns} columns"
        if self.suspects:
            msg += f" (check: {', '.join(self.suspects)})"
        super().__init__(msg)


class InsufficientDataError(ModelFitError):
    """Too few complete rows to leave positive residual degrees of freedom."""

    def __init__(self, n_obs: int, n_params: int):
        self.n_obs = n_obs
        self.n_params = n_params
        super().__init__(
            f"{n_obs} complete rows for {n_params} parameters "
            f"({n_obs - n_params} residual degrees of freedom)"
        )
