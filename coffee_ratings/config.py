"""
Global configuration for the Coffee Ratings pipeline.

Implements project conventions for:
- File paths and data source URLs
- Column sets of the raw and cleaned tables
- Date formats accepted by the cleaner
- Country-name canonicalization rules
- Cleaning thresholds
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
STAGING_DIR = DATA_DIR / "staging"
OUTPUT_DIR = PROJECT_ROOT / "output"

RAW_RATINGS_FILE = RAW_DIR / "coffee_ratings.csv"
CLEANED_RATINGS_FILENAME = "coffee_ratings_clean.parquet"
MANIFEST_FILE = RAW_DIR / "manifest.jsonl"

# =============================================================================
# DATA SOURCE URLS
# =============================================================================

COFFEE_RATINGS_URL = (
    "https://raw.githubusercontent.com/rfordatascience/tidytuesday/master/"
    "data/2020/2020-07-07/coffee_ratings.csv"
)

LICENSE_NOTES = {
    "coffee_ratings": (
        "Coffee Quality Institute reviews, scraped by James LeDoux and "
        "redistributed through the R4DS TidyTuesday project (CC0)."
    ),
}

MANIFEST_FIELDS = [
    "source",
    "retrieved_utc",
    "url",
    "path",
    "sha256",
    "n_rows",
    "n_columns",
    "license",
]

# =============================================================================
# COLUMN SETS
# =============================================================================

RAW_COLUMN_COUNT = 43

SENSORY_COLUMNS = [
    "aroma",
    "flavor",
    "aftertaste",
    "acidity",
    "body",
    "balance",
    "uniformity",
    "clean_cup",
    "sweetness",
    "cupper_points",
]

# Columns correlated in the report
RATING_COLUMNS = SENSORY_COLUMNS + ["total_cup_points"]

NUMERIC_COLUMNS = SENSORY_COLUMNS + [
    "total_cup_points",
    "moisture",
    "altitude_mean_meters",
]

# The 20 columns retained from the raw table
SELECTED_COLUMNS = [
    "total_cup_points",
    "species",
    "country_of_origin",
    "grading_date",
    "expiration",
    "variety",
    "processing_method",
    "aroma",
    "flavor",
    "aftertaste",
    "acidity",
    "body",
    "balance",
    "uniformity",
    "clean_cup",
    "sweetness",
    "cupper_points",
    "moisture",
    "color",
    "altitude_mean_meters",
]

DERIVED_COLUMNS = ["days_to_expiration", "region"]

# =============================================================================
# DATE CONVENTIONS
# =============================================================================

# Grading dates in the source look like "April 4th, 2015"; ordinal suffixes
# are stripped before these formats are tried.
DATE_PARSE_FORMATS = [
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%m/%d/%Y",
    "%d %B %Y",
    "%Y/%m/%d",
]

# =============================================================================
# COUNTRY NORMALIZATION
# =============================================================================

COUNTRY_SYNONYMS: Dict[str, str] = {
    "United States": "USA",
    "United States (Hawaii)": "USA",
    "United States (Puerto Rico)": "Puerto Rico",
    "Tanzania, United Republic Of": "Tanzania",
    "Cote d?Ivoire": "Ivory Coast",
}

# Boundary datasets (Natural Earth and friends) spell some countries
# differently from the canonical names above.
BOUNDARY_NAME_ALIASES: Dict[str, str] = {
    "USA": "United States of America",
    "Tanzania": "United Republic of Tanzania",
    "Ivory Coast": "Côte d'Ivoire",
    "Laos": "Lao PDR",
}

# =============================================================================
# CLEANING CONFIGURATION
# =============================================================================

@dataclass
class CleaningConfig:
    """Thresholds and lookup tables used by the cleaning stage."""

    # Altitudes above this are entry errors and become null
    max_altitude_meters: float = 8000.0

    # Rows with this total score are failed entries, not real scores
    invalid_total_cup_points: float = 0.0

    columns: List[str] = field(default_factory=lambda: list(SELECTED_COLUMNS))

    country_synonyms: Dict[str, str] = field(
        default_factory=lambda: dict(COUNTRY_SYNONYMS)
    )


CLEANING_CONFIG = CleaningConfig()

# =============================================================================
# QA CONFIGURATION
# =============================================================================

@dataclass
class ValidationConfig:
    """Plausibility bounds reported (not enforced) by the QA stage."""

    min_sensory_score: float = 0.0
    max_sensory_score: float = 10.0
    max_total_cup_points: float = 100.0
    min_altitude_meters: float = 0.0


VALIDATION_CONFIG = ValidationConfig()

# =============================================================================
# RUNTIME CONFIGURATION
# =============================================================================

@dataclass
class PipelineConfig:
    """Run-level settings, loadable from a JSON file."""

    input_path: str = ""
    source_url: str = COFFEE_RATINGS_URL
    output_dir: str = str(OUTPUT_DIR)
    staging_dir: str = str(STAGING_DIR)
    boundaries_path: str = ""

    max_altitude_meters: float = CLEANING_CONFIG.max_altitude_meters
    correlation_min_periods: int = 1
    top_n_countries: int = 15

    force_download: bool = False
    make_figures: bool = True

    @property
    def output_path(self) -> Path:
        p = Path(self.output_dir)
        p.mkdir(parents=True, exist_ok=True)
        return p

    @property
    def staging_path(self) -> Path:
        p = Path(self.staging_dir)
        p.mkdir(parents=True, exist_ok=True)
        return p

    def cleaning_config(self) -> CleaningConfig:
        return CleaningConfig(max_altitude_meters=self.max_altitude_meters)


def load_config(path: Optional[str | Path] = None) -> PipelineConfig:
    """Load config from JSON, falling back to defaults for missing keys."""
    if path is None:
        logger.info("No config path supplied, using all defaults.")
        return PipelineConfig()
    path = Path(path)
    if not path.exists():
        logger.warning("Config file %s not found, using defaults.", path)
        return PipelineConfig()
    with open(path) as f:
        data = json.load(f)
    known = {f.name for f in PipelineConfig.__dataclass_fields__.values()}
    filtered = {k: v for k, v in data.items() if k in known}
    ignored = sorted(set(data) - known)
    if ignored:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(ignored))
    cfg = PipelineConfig(**filtered)
    logger.info("Loaded config from %s (%d overrides).", path, len(filtered))
    return cfg


def save_config(cfg: PipelineConfig, path: str | Path) -> None:
    """Serialise the current config to JSON for reproducibility."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(asdict(cfg), f, indent=2)
    logger.info("Saved config to %s", path)
