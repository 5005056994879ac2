"""
Shared synthetic data for the coffee ratings tests.

The raw table mimics the CQI source: string dates with ordinal suffixes,
raw country spellings, a few failed entries (total_cup_points == 0) and a
few altitude typos far above any real farm.
"""

from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from coffee_ratings.config import SELECTED_COLUMNS

COUNTRIES = [
    "Brazil",
    "Colombia",
    "Ethiopia",
    "Kenya",
    "United States",
    "United States (Hawaii)",
    "Taiwan",
    "India",
]


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def long_date(d: date) -> str:
    """Format like the source: 'April 4th, 2015'."""
    return f"{d.strftime('%B')} {d.day}{_ordinal(d.day)}, {d.year}"


def make_raw_ratings(n: int = 240, seed: int = 42) -> pd.DataFrame:
    """Raw ratings table with the 20 analysis columns plus unused extras."""
    rng = np.random.RandomState(seed)

    species = np.where(rng.rand(n) < 0.85, "Arabica", "Robusta")
    country = rng.choice(COUNTRIES, size=n)
    processing = rng.choice(["Washed / Wet", "Natural / Dry"], size=n).astype(object)
    processing[rng.rand(n) < 0.05] = None

    altitude = rng.uniform(400, 2200, size=n)
    altitude[rng.rand(n) < 0.10] = np.nan

    acidity = rng.normal(7.5, 0.3, size=n)
    balance = rng.normal(7.5, 0.3, size=n)
    body = rng.normal(7.5, 0.3, size=n)
    alt_filled = np.nan_to_num(altitude, nan=1200.0)
    flavor = (
        1.0
        + 0.35 * acidity
        + 0.30 * balance
        + 0.20 * body
        + 0.0002 * alt_filled
        - 0.15 * (species == "Robusta")
        + rng.normal(0, 0.1, size=n)
    )

    sensory = {
        "aroma": rng.normal(7.6, 0.3, size=n),
        "flavor": flavor,
        "aftertaste": rng.normal(7.4, 0.3, size=n),
        "acidity": acidity,
        "body": body,
        "balance": balance,
        "uniformity": np.full(n, 10.0),
        "clean_cup": np.full(n, 10.0),
        "sweetness": np.full(n, 10.0),
        "cupper_points": rng.normal(7.5, 0.3, size=n),
    }
    total = sum(sensory.values())

    start = date(2015, 1, 1)
    graded = [start + timedelta(days=int(d)) for d in rng.randint(0, 900, size=n)]
    expires = [g + timedelta(days=365) for g in graded]

    raw = pd.DataFrame({
        "total_cup_points": total,
        "species": species,
        "owner": [f"Owner {i % 17}" for i in range(n)],
        "country_of_origin": country,
        "farm_name": [f"Farm {i}" for i in range(n)],
        "grading_date": [long_date(d) for d in graded],
        "expiration": [long_date(d) for d in expires],
        "variety": rng.choice(["Bourbon", "Caturra", "Typica", None], size=n),
        "processing_method": processing,
        "moisture": rng.uniform(0.0, 0.13, size=n).round(2),
        "color": rng.choice(["Green", "Bluish-Green", "Blue-Green", None], size=n),
        "altitude_mean_meters": altitude,
        "unit_of_measurement": "m",
        **sensory,
    })

    # Failed entries and altitude typos
    raw.loc[[3, 57], "total_cup_points"] = 0.0
    raw.loc[[10, 11], "altitude_mean_meters"] = [190164.0, 11000.0]
    return raw


@pytest.fixture
def raw_ratings() -> pd.DataFrame:
    return make_raw_ratings()


@pytest.fixture
def cleaned_ratings(raw_ratings) -> pd.DataFrame:
    from coffee_ratings.parsing import clean
    return clean(raw_ratings)


@pytest.fixture
def selected_columns():
    return list(SELECTED_COLUMNS)
