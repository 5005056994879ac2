"""
World Bank region classification for coffee-producing countries.

Keys are the canonical country labels produced by
:func:`~coffee_ratings.parsing.string_normalizer.normalize_country`.
"""

import logging
from typing import Dict, Optional

import pandas as pd

logger = logging.getLogger(__name__)

LATIN_AMERICA = "Latin America & Caribbean"
SUB_SAHARAN_AFRICA = "Sub-Saharan Africa"
EAST_ASIA = "East Asia & Pacific"
SOUTH_ASIA = "South Asia"
NORTH_AMERICA = "North America"
MIDDLE_EAST = "Middle East & North Africa"

WORLD_BANK_REGIONS: Dict[str, str] = {
    # Latin America & Caribbean
    "Brazil": LATIN_AMERICA,
    "Bolivia": LATIN_AMERICA,
    "Colombia": LATIN_AMERICA,
    "Costa Rica": LATIN_AMERICA,
    "Cuba": LATIN_AMERICA,
    "Dominican Republic": LATIN_AMERICA,
    "Ecuador": LATIN_AMERICA,
    "El Salvador": LATIN_AMERICA,
    "Guatemala": LATIN_AMERICA,
    "Haiti": LATIN_AMERICA,
    "Honduras": LATIN_AMERICA,
    "Jamaica": LATIN_AMERICA,
    "Mexico": LATIN_AMERICA,
    "Nicaragua": LATIN_AMERICA,
    "Panama": LATIN_AMERICA,
    "Peru": LATIN_AMERICA,
    "Puerto Rico": LATIN_AMERICA,
    "Venezuela": LATIN_AMERICA,
    # Sub-Saharan Africa
    "Burundi": SUB_SAHARAN_AFRICA,
    "Cameroon": SUB_SAHARAN_AFRICA,
    "Democratic Republic of the Congo": SUB_SAHARAN_AFRICA,
    "Ethiopia": SUB_SAHARAN_AFRICA,
    "Ivory Coast": SUB_SAHARAN_AFRICA,
    "Kenya": SUB_SAHARAN_AFRICA,
    "Madagascar": SUB_SAHARAN_AFRICA,
    "Malawi": SUB_SAHARAN_AFRICA,
    "Mauritius": SUB_SAHARAN_AFRICA,
    "Rwanda": SUB_SAHARAN_AFRICA,
    "Tanzania": SUB_SAHARAN_AFRICA,
    "Uganda": SUB_SAHARAN_AFRICA,
    "Zambia": SUB_SAHARAN_AFRICA,
    "Zimbabwe": SUB_SAHARAN_AFRICA,
    # East Asia & Pacific
    "China": EAST_ASIA,
    "Indonesia": EAST_ASIA,
    "Japan": EAST_ASIA,
    "Laos": EAST_ASIA,
    "Myanmar": EAST_ASIA,
    "Papua New Guinea": EAST_ASIA,
    "Philippines": EAST_ASIA,
    "Taiwan": EAST_ASIA,
    "Thailand": EAST_ASIA,
    "Vietnam": EAST_ASIA,
    "Timor-Leste": EAST_ASIA,
    # South Asia
    "India": SOUTH_ASIA,
    "Nepal": SOUTH_ASIA,
    "Sri Lanka": SOUTH_ASIA,
    # North America
    "USA": NORTH_AMERICA,
    "Canada": NORTH_AMERICA,
    # Middle East & North Africa
    "Yemen": MIDDLE_EAST,
}


def lookup_region(
    country: Optional[str],
    regions: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """Return the region for a canonical country name, or None if unknown."""
    if country is None or (isinstance(country, float) and pd.isna(country)):
        return None
    if regions is None:
        regions = WORLD_BANK_REGIONS
    return regions.get(country)


def assign_region(
    df: pd.DataFrame,
    lookup: Optional[Dict[str, str]] = None,
    country_col: str = "country_of_origin",
) -> pd.DataFrame:
    """
    Add a ``region`` column derived from the canonical country.

    ``lookup`` maps country to region and defaults to WORLD_BANK_REGIONS.
    Countries absent from it get a null region.

    Returns:
        Copy of ``df`` with the ``region`` column set
    """
    out = df.copy()
    out["region"] = out[country_col].map(lambda c: lookup_region(c, lookup)).astype(object)

    unknown = out.loc[out[country_col].notna() & out["region"].isna(), country_col]
    if len(unknown) > 0:
        logger.warning(
            f"No region for {unknown.nunique()} countries "
            f"({len(unknown)} rows): {sorted(unknown.unique())}"
        )
    return out
