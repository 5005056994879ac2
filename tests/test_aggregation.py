"""
Tests for the aggregation stage: country summaries, species shares and
the pairwise-complete correlation matrix.
"""

import numpy as np
import pandas as pd
import pytest


class TestCountrySummary:

    def test_counts_cover_non_null_countries(self, cleaned_ratings):
        from coffee_ratings.aggregation import summarize_by_country

        df = cleaned_ratings.copy()
        df.loc[:4, "country_of_origin"] = None
        summary = summarize_by_country(df)
        assert summary["count"].sum() == df["country_of_origin"].notna().sum()
        assert list(summary.columns) == ["count", "mean_flavor"]

    def test_mean_ignores_null_flavor(self):
        from coffee_ratings.aggregation import summarize_by_country

        df = pd.DataFrame({
            "country_of_origin": ["Brazil", "Brazil", "Brazil", "Kenya"],
            "flavor": [7.0, 8.0, np.nan, 7.5],
        })
        summary = summarize_by_country(df)
        assert summary.loc["Brazil", "count"] == 3
        assert summary.loc["Brazil", "mean_flavor"] == pytest.approx(7.5)
        assert summary.loc["Kenya", "mean_flavor"] == pytest.approx(7.5)

    def test_sorted_by_count_then_name(self):
        from coffee_ratings.aggregation import summarize_by_country

        df = pd.DataFrame({
            "country_of_origin": ["Kenya", "Brazil", "Peru", "Peru", "Brazil", "Kenya", "Peru"],
            "flavor": [7.0] * 7,
        })
        summary = summarize_by_country(df)
        assert list(summary.index) == ["Peru", "Brazil", "Kenya"]

    def test_duplicate_index_labels(self):
        from coffee_ratings.aggregation import summarize_by_group

        df = pd.DataFrame(
            {"region": ["A", "B", None], "flavor": [7.0, 8.0, 9.0]},
            index=[0, 0, 0],
        )
        summary = summarize_by_group(df, "region", "flavor")
        assert summary["count"].sum() == 2
        assert summary.loc["B", "mean_flavor"] == pytest.approx(8.0)


class TestSpeciesDistribution:

    def test_percentages_sum_to_100(self, cleaned_ratings):
        from coffee_ratings.aggregation import species_distribution

        dist = species_distribution(cleaned_ratings)
        assert dist["percent"].sum() == pytest.approx(100.0, abs=1e-6)
        assert dist["count"].sum() == cleaned_ratings["species"].notna().sum()

    def test_null_species_excluded(self):
        from coffee_ratings.aggregation import species_distribution

        df = pd.DataFrame({"species": ["Arabica", "Arabica", "Robusta", None]})
        dist = species_distribution(df)
        assert dist.loc["Arabica", "percent"] == pytest.approx(200 / 3)
        assert dist["percent"].sum() == pytest.approx(100.0, abs=1e-6)


class TestCorrelation:

    def test_symmetric_unit_diagonal(self, cleaned_ratings):
        from coffee_ratings.aggregation import correlation_matrix

        cols = ["aroma", "flavor", "acidity", "balance", "body", "total_cup_points"]
        corr = correlation_matrix(cleaned_ratings, columns=cols)
        values = corr.to_numpy()
        assert np.allclose(values, values.T, equal_nan=True)
        assert np.all(np.diag(values) == 1.0)
        assert np.nanmax(np.abs(values)) <= 1.0 + 1e-12

    def test_constant_column_diagonal_nan(self, cleaned_ratings):
        from coffee_ratings.aggregation import correlation_matrix

        corr = correlation_matrix(cleaned_ratings)
        # uniformity is 10 everywhere in the fixture
        assert np.isnan(corr.loc["uniformity", "uniformity"])
        assert corr.loc["flavor", "flavor"] == 1.0

    def test_pairwise_not_listwise(self):
        from coffee_ratings.aggregation import correlation_matrix, pairwise_counts

        np.random.seed(42)
        n = 100
        a = np.random.normal(size=n)
        b = a + np.random.normal(scale=0.5, size=n)
        c = np.random.normal(size=n)
        c[:80] = np.nan  # sparse column
        df = pd.DataFrame({"a": a, "b": b, "c": c})

        corr = correlation_matrix(df, columns=["a", "b", "c"])
        expected = np.corrcoef(a, b)[0, 1]
        assert corr.loc["a", "b"] == pytest.approx(expected)

        counts = pairwise_counts(df, columns=["a", "b", "c"])
        assert counts.loc["a", "b"] == 100
        assert counts.loc["a", "c"] == 20

    def test_min_periods(self):
        from coffee_ratings.aggregation import correlation_matrix

        df = pd.DataFrame({
            "a": [1.0, 2.0, 3.0, 4.0],
            "b": [2.0, np.nan, np.nan, 5.0],
        })
        corr = correlation_matrix(df, columns=["a", "b"], min_periods=3)
        assert np.isnan(corr.loc["a", "b"])

    def test_strongest_pairs(self, cleaned_ratings):
        from coffee_ratings.aggregation import correlation_matrix, strongest_pairs

        corr = correlation_matrix(cleaned_ratings)
        pairs = strongest_pairs(corr, n=3)
        assert len(pairs) == 3
        assert pairs["r"].abs().is_monotonic_decreasing
        assert (pairs["column_a"] != pairs["column_b"]).all()


class TestRatingsSummary:

    def test_summary_columns(self, cleaned_ratings):
        from coffee_ratings.aggregation import summarize_ratings

        out = summarize_ratings(cleaned_ratings)
        assert "altitude_mean_meters" in out.index
        assert out.loc["altitude_mean_meters", "count"] == (
            cleaned_ratings["altitude_mean_meters"].notna().sum()
        )
        assert out.loc["altitude_mean_meters", "max"] <= 8000
