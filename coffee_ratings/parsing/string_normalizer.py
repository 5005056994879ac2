"""
String normalization utilities for coffee rating records.

Implements project conventions:
- Country names collapse to a canonical label via a fixed synonym table
- Surrounding whitespace is stripped
- Grading/expiration dates accept ISO, US and long-form dates
  ("April 4th, 2015"), with ordinal suffixes removed first
"""

import re
from datetime import date, datetime
from typing import Dict, Optional

import pandas as pd

from ..config import COUNTRY_SYNONYMS, DATE_PARSE_FORMATS

_ORDINAL_RE = re.compile(r"(\d+)(st|nd|rd|th)\b", flags=re.IGNORECASE)


def normalize_country(
    name: Optional[str],
    synonyms: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """
    Map a raw country string to its canonical label.

    Values not in the synonym table pass through (stripped). Canonical
    labels are never themselves synonyms, so the mapping is idempotent.

    Args:
        name: Raw country string
        synonyms: Synonym table (defaults to COUNTRY_SYNONYMS)

    Returns:
        Canonical country name, or None if input is None/empty
    """
    if name is None or (isinstance(name, float) and pd.isna(name)):
        return None
    text = str(name).strip()
    if not text:
        return None
    if synonyms is None:
        synonyms = COUNTRY_SYNONYMS
    return synonyms.get(text, text)


def normalize_country_series(
    countries: pd.Series,
    synonyms: Optional[Dict[str, str]] = None,
) -> pd.Series:
    """Vectorised :func:`normalize_country` preserving the index."""
    return countries.map(lambda v: normalize_country(v, synonyms)).astype(object)


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string into a date object.

    Tries each of DATE_PARSE_FORMATS after removing ordinal suffixes.

    Args:
        date_str: Date string to parse

    Returns:
        date object, or None if parsing fails
    """
    if date_str is None or (isinstance(date_str, float) and pd.isna(date_str)):
        return None
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str

    text = str(date_str).strip()
    if not text:
        return None
    text = _ORDINAL_RE.sub(r"\1", text)
    text = re.sub(r"\s+", " ", text)

    for fmt in DATE_PARSE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None


def days_between(start: pd.Series, end: pd.Series) -> pd.Series:
    """
    Whole calendar days from ``start`` to ``end``, element-wise.

    Either side unparseable gives <NA>.
    """
    start_dates = pd.to_datetime(start.map(parse_date), errors="coerce")
    end_dates = pd.to_datetime(end.map(parse_date), errors="coerce")
    return (end_dates - start_dates).dt.days.astype("Int64")
