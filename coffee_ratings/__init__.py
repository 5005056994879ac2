"""
Coffee Ratings - exploratory analysis of Coffee Quality Institute cupping scores.

Load, clean, summarize and model the CQI ratings table, and render a
Markdown report with figures.
"""

__version__ = "0.1.0"

from .exceptions import (
    CoffeeRatingsError,
    SchemaError,
    ModelSpecError,
    ModelFitError,
    RankDeficiencyError,
    InsufficientDataError,
)
from .config import PipelineConfig, load_config, save_config

__all__ = [
    "__version__",
    "CoffeeRatingsError",
    "SchemaError",
    "ModelSpecError",
    "ModelFitError",
    "RankDeficiencyError",
    "InsufficientDataError",
    "PipelineConfig",
    "load_config",
    "save_config",
]
