"""
Configuration for regression specifications.

Contains the model registry used by the modeling stage. Every categorical
predictor carries an explicit reference level so that coefficients are
read against a meaningful baseline.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..parsing.region_lookup import LATIN_AMERICA


# =============================================================================
# Reference Levels
# =============================================================================

REFERENCE_LEVELS: Dict[str, str] = {
    "species": "Arabica",
    "region": LATIN_AMERICA,
    "processing_method": "Washed / Wet",
}


# =============================================================================
# Regression Specifications
# =============================================================================

@dataclass
class RegressionSpec:
    """Specification for a single regression."""

    id: str
    name: str
    formula: str
    reference_levels: Dict[str, str] = field(default_factory=dict)
    description: str = ""

    @property
    def response(self) -> str:
        return self.formula.split("~", 1)[0].strip()


REGRESSIONS: Dict[str, RegressionSpec] = {
    "M1": RegressionSpec(
        id="M1",
        name="Altitude by species interaction",
        formula="flavor ~ altitude_mean_meters * species",
        reference_levels={"species": REFERENCE_LEVELS["species"]},
        description=(
            "Does the altitude slope of flavor differ between Arabica "
            "and Robusta lots?"
        ),
    ),
    "M2": RegressionSpec(
        id="M2",
        name="Additive multi-factor model",
        formula=(
            "flavor ~ altitude_mean_meters + species + region + processing_method"
            " + acidity + balance + body"
        ),
        reference_levels=dict(REFERENCE_LEVELS),
        description=(
            "Flavor on altitude, species, origin region, processing method "
            "and three correlated sensory scores."
        ),
    ),
}


def get_specs(ids: Optional[List[str]] = None) -> List[RegressionSpec]:
    """Registry entries in declaration order, optionally filtered by id."""
    if ids is None:
        return list(REGRESSIONS.values())
    unknown = [i for i in ids if i not in REGRESSIONS]
    if unknown:
        raise KeyError(f"Unknown regression ids: {unknown}")
    return [REGRESSIONS[i] for i in ids]
