"""
Data validation functions for the cleaned ratings table.

Implements plausibility and consistency checks. Invariant checks should
always pass on cleaner output; range checks report values the cleaner
deliberately passes through unchanged.
"""

import pandas as pd
from typing import Dict, List, Any, Optional
from dataclasses import dataclass
import logging

from ..config import (
    CLEANING_CONFIG,
    SENSORY_COLUMNS,
    VALIDATION_CONFIG,
    CleaningConfig,
    ValidationConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    check_name: str
    passed: bool
    message: str
    affected_count: int = 0
    affected_fraction: float = 0.0
    details: Dict[str, Any] = None


def _fraction(count: int, total: int) -> float:
    return count / total if total > 0 else 0.0


def validate_cleaned_ratings(
    df: pd.DataFrame,
    config: Optional[ValidationConfig] = None,
    cleaning: Optional[CleaningConfig] = None,
) -> List[ValidationResult]:
    """
    Validate the cleaned ratings table.

    Checks:
    - total_cup_points never equals the failed-entry marker
    - altitude_mean_meters within the configured maximum or null
    - country names already canonical
    - sensory scores within [0, 10] (reported only)
    - total_cup_points within (0, 100] (reported only)
    - positive altitudes (reported only)
    - non-negative days_to_expiration (reported only)
    - region resolved for every country (reported only)

    Returns:
        List of ValidationResult objects
    """
    config = config or VALIDATION_CONFIG
    cleaning = cleaning or CLEANING_CONFIG
    results = []
    n = len(df)

    # Failed entries removed
    if "total_cup_points" in df.columns:
        tcp = df["total_cup_points"]
        zero = int((tcp == cleaning.invalid_total_cup_points).sum())
        results.append(ValidationResult(
            check_name="total_cup_points_nonzero",
            passed=(zero == 0),
            message=f"{zero} rows with total_cup_points == {cleaning.invalid_total_cup_points:g}",
            affected_count=zero,
            affected_fraction=_fraction(zero, n),
        ))

        valid = tcp.dropna()
        out_of_range = int(((valid <= 0) | (valid > config.max_total_cup_points)).sum())
        results.append(ValidationResult(
            check_name="total_cup_points_range",
            passed=(out_of_range == 0),
            message=f"{out_of_range} values outside (0, {config.max_total_cup_points:g}]",
            affected_count=out_of_range,
            affected_fraction=_fraction(out_of_range, len(valid)),
        ))

    # Altitude bound
    if "altitude_mean_meters" in df.columns:
        alt = df["altitude_mean_meters"].dropna()
        too_high = int((alt > cleaning.max_altitude_meters).sum())
        results.append(ValidationResult(
            check_name="altitude_upper_bound",
            passed=(too_high == 0),
            message=f"{too_high} altitudes above {cleaning.max_altitude_meters:,.0f} m",
            affected_count=too_high,
            affected_fraction=_fraction(too_high, len(alt)),
        ))

        non_positive = int((alt <= config.min_altitude_meters).sum())
        results.append(ValidationResult(
            check_name="altitude_positive",
            passed=(non_positive == 0),
            message=f"{non_positive} altitudes at or below {config.min_altitude_meters:g} m",
            affected_count=non_positive,
            affected_fraction=_fraction(non_positive, len(alt)),
        ))

    # Country canonicalization
    if "country_of_origin" in df.columns:
        raw_labels = set(cleaning.country_synonyms)
        unmapped = df["country_of_origin"].isin(raw_labels)
        count = int(unmapped.sum())
        results.append(ValidationResult(
            check_name="country_canonical",
            passed=(count == 0),
            message=f"{count} rows with non-canonical country names",
            affected_count=count,
            affected_fraction=_fraction(count, n),
            details={"labels": sorted(df.loc[unmapped, "country_of_origin"].unique())},
        ))

    # Sensory score bounds
    for col in SENSORY_COLUMNS:
        if col not in df.columns:
            continue
        s = df[col].dropna()
        outside = int(((s < config.min_sensory_score) | (s > config.max_sensory_score)).sum())
        results.append(ValidationResult(
            check_name=f"{col}_range",
            passed=(outside == 0),
            message=(f"{outside} values outside "
                     f"[{config.min_sensory_score:g}, {config.max_sensory_score:g}]"),
            affected_count=outside,
            affected_fraction=_fraction(outside, len(s)),
        ))

    # Expiration after grading
    if "days_to_expiration" in df.columns:
        d = df["days_to_expiration"].dropna()
        negative = int((d < 0).sum())
        results.append(ValidationResult(
            check_name="days_to_expiration_non_negative",
            passed=(negative == 0),
            message=f"{negative} lots expiring before their grading date",
            affected_count=negative,
            affected_fraction=_fraction(negative, len(d)),
        ))

    # Region coverage
    if "region" in df.columns and "country_of_origin" in df.columns:
        unresolved = df["country_of_origin"].notna() & df["region"].isna()
        count = int(unresolved.sum())
        results.append(ValidationResult(
            check_name="region_resolved",
            passed=(count == 0),
            message=f"{count} rows whose country has no region",
            affected_count=count,
            affected_fraction=_fraction(count, n),
            details={"countries": sorted(df.loc[unresolved, "country_of_origin"].unique())},
        ))

    failed = [r.check_name for r in results if not r.passed]
    if failed:
        logger.info(f"Validation: {len(failed)} of {len(results)} checks flagged: {failed}")
    return results
