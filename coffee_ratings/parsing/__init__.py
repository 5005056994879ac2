"""Parsing utilities for raw rating records."""

from .string_normalizer import (
    normalize_country,
    normalize_country_series,
    parse_date,
    days_between,
)
from .region_lookup import WORLD_BANK_REGIONS, lookup_region, assign_region
from .ratings_cleaner import clean, check_schema

__all__ = [
    "normalize_country",
    "normalize_country_series",
    "parse_date",
    "days_between",
    "WORLD_BANK_REGIONS",
    "lookup_region",
    "assign_region",
    "clean",
    "check_schema",
]
