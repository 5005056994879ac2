"""
End-to-end tests for the 5-stage pipeline and the CLI, run against a
synthetic raw CSV in a temporary directory.
"""

import json

import numpy as np
import pandas as pd
import pytest

from conftest import make_raw_ratings


def _write_boundaries(path):
    """Two square 'countries', one spelled the way boundary files spell it."""
    def square(x0, y0):
        return [[[x0, y0], [x0 + 5, y0], [x0 + 5, y0 + 5], [x0, y0 + 5], [x0, y0]]]

    collection = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name": "Brazil"},
             "geometry": {"type": "Polygon", "coordinates": square(-50, -10)}},
            {"type": "Feature", "properties": {"ADMIN": "United States of America"},
             "geometry": {"type": "MultiPolygon", "coordinates": [square(-100, 30)]}},
        ],
    }
    path.write_text(json.dumps(collection))
    return path


@pytest.fixture
def pipeline_config(tmp_path):
    from coffee_ratings.config import PipelineConfig

    raw_path = tmp_path / "coffee_ratings.csv"
    make_raw_ratings().to_csv(raw_path, index=False)
    return PipelineConfig(
        input_path=str(raw_path),
        output_dir=str(tmp_path / "output"),
        staging_dir=str(tmp_path / "staging"),
        boundaries_path=str(_write_boundaries(tmp_path / "world.geojson")),
    )


class TestFullPipeline:

    def test_all_stages(self, pipeline_config):
        from coffee_ratings.config import CLEANED_RATINGS_FILENAME
        from coffee_ratings.pipeline import run_full_pipeline

        results = run_full_pipeline(pipeline_config)

        assert all(v is not None for v in results.values())
        assert set(results["stage4_model"]["models"]) == {"M1", "M2"}
        assert results["stage4_model"]["errors"] == {}

        out = pipeline_config.output_path
        assert (pipeline_config.staging_path / CLEANED_RATINGS_FILENAME).exists()
        for name in ("country_summary", "species", "correlation",
                     "model_coefficients", "model_fit", "model_vif"):
            assert (out / "tables" / f"{name}.csv").exists()

        figures = results["stage5_report"]["figures"]
        for key in ("map", "country_counts", "correlation_matrix",
                    "altitude_flavor", "residuals_M1", "residuals_M2"):
            assert figures[key].exists()

        report = (out / "coffee_report.md").read_text()
        assert "# Coffee Quality Ratings Report" in report
        assert "### M1" in report and "### M2" in report
        assert "(figures/map_count.png)" in report
        assert (out / "qa_report.md").exists()

    def test_coefficient_table(self, pipeline_config):
        from coffee_ratings.pipeline import run_full_pipeline

        pipeline_config.make_figures = False
        run_full_pipeline(pipeline_config)

        coefs = pd.read_csv(pipeline_config.output_path / "tables" / "model_coefficients.csv")
        assert set(coefs["model"]) == {"M1", "M2"}
        m1 = coefs[coefs["model"] == "M1"]
        assert list(m1["term"]) == [
            "Intercept",
            "altitude_mean_meters",
            "species[T.Robusta]",
            "altitude_mean_meters:species[T.Robusta]",
        ]

    def test_single_stage_reuses_staged_table(self, pipeline_config):
        from coffee_ratings.pipeline import run_clean, run_single_stage

        cleaned = run_clean(cfg=pipeline_config)
        aggregates = run_single_stage("aggregate", pipeline_config)
        assert aggregates["country_summary"]["count"].sum() == len(cleaned)

        with pytest.raises(ValueError):
            run_single_stage("publish", pipeline_config)

    def test_schema_error_stops_pipeline(self, pipeline_config, tmp_path):
        from coffee_ratings.config import CLEANED_RATINGS_FILENAME
        from coffee_ratings.exceptions import SchemaError
        from coffee_ratings.pipeline import run_full_pipeline

        bad = tmp_path / "bad.csv"
        make_raw_ratings().drop(columns=["species"]).to_csv(bad, index=False)
        pipeline_config.input_path = str(bad)

        with pytest.raises(SchemaError):
            run_full_pipeline(pipeline_config)
        assert not (pipeline_config.staging_path / CLEANED_RATINGS_FILENAME).exists()


class TestModelIsolation:

    def test_failed_model_does_not_stop_others(self, cleaned_ratings, tmp_path):
        from coffee_ratings.config import PipelineConfig
        from coffee_ratings.pipeline import run_aggregate, run_models, run_report

        df = cleaned_ratings.copy()
        df["processing_method"] = None

        results = run_models(df)
        assert set(results["models"]) == {"M1"}
        assert "M2" in results["errors"]

        cfg = PipelineConfig(output_dir=str(tmp_path / "out"),
                             staging_dir=str(tmp_path / "staging"),
                             make_figures=False)
        paths = run_report(df, run_aggregate(df, cfg), results, cfg)
        report = paths["report"].read_text()
        assert "### M2\n\nNot estimated:" in report

    def test_rank_deficient_model_reported(self, cleaned_ratings):
        from coffee_ratings.pipeline import run_models

        df = cleaned_ratings.copy()
        df.loc[df["species"] == "Robusta", "altitude_mean_meters"] = np.nan

        results = run_models(df, spec_ids=["M1"])
        assert results["models"] == {}
        assert "rank" in results["errors"]["M1"]


class TestCLI:

    def _config_file(self, pipeline_config, tmp_path):
        path = tmp_path / "pipeline.json"
        path.write_text(json.dumps({
            "staging_dir": pipeline_config.staging_dir,
            "output_dir": pipeline_config.output_dir,
            "make_figures": False,
            "not_a_setting": 1,
        }))
        return path

    def test_all_command(self, pipeline_config, tmp_path):
        from coffee_ratings.cli import main

        cfg_path = self._config_file(pipeline_config, tmp_path)
        code = main(["all", "--config", str(cfg_path), "--input", pipeline_config.input_path])
        assert code == 0
        assert (pipeline_config.output_path / "coffee_report.md").exists()

    def test_qa_command(self, pipeline_config, tmp_path):
        from coffee_ratings.cli import main

        cfg_path = self._config_file(pipeline_config, tmp_path)
        code = main(["qa", "--config", str(cfg_path), "--input", pipeline_config.input_path])
        assert code == 0
        assert (pipeline_config.output_path / "qa_report.md").exists()

    def test_schema_error_exit_code(self, pipeline_config, tmp_path):
        from coffee_ratings.cli import main

        bad = tmp_path / "bad.csv"
        make_raw_ratings().drop(columns=["flavor"]).to_csv(bad, index=False)
        cfg_path = self._config_file(pipeline_config, tmp_path)
        assert main(["clean", "--config", str(cfg_path), "--input", str(bad)]) == 1

    def test_config_round_trip(self, tmp_path):
        from coffee_ratings.config import PipelineConfig, load_config, save_config

        cfg = PipelineConfig(top_n_countries=5, make_figures=False)
        path = tmp_path / "cfg.json"
        save_config(cfg, path)
        assert load_config(path) == cfg
        assert load_config(tmp_path / "missing.json") == PipelineConfig()


def _write_awkward_boundaries(path):
    """A country with a lake cut out of it and one stored as a GeometryCollection."""
    outer = [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]
    lake = [[4, 4], [6, 4], [6, 6], [4, 6], [4, 4]]
    kenya = [[20, 0], [25, 0], [25, 5], [20, 5], [20, 0]]
    collection = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name": "South Africa"},
             "geometry": {"type": "Polygon", "coordinates": [outer, lake]}},
            {"type": "Feature", "properties": {"name": "Kenya"},
             "geometry": {"type": "GeometryCollection", "geometries": [
                 {"type": "Polygon", "coordinates": [kenya]},
             ]}},
            {"type": "Feature", "properties": {"name": "United Republic of Tanzania"},
             "geometry": {"type": "Polygon", "coordinates": [[[20, -10], [25, -10], [25, -5], [20, -5], [20, -10]]]}},
        ],
    }
    path.write_text(json.dumps(collection))
    return path


class TestFigures:

    def test_boundaries_keep_holes_and_collections(self, tmp_path):
        from coffee_ratings.reporting import load_boundaries

        gdf = load_boundaries(_write_awkward_boundaries(tmp_path / "world.geojson"))

        assert sorted(gdf["country"]) == ["Kenya", "South Africa", "Tanzania"]
        south_africa = gdf.loc[gdf["country"] == "South Africa", "geometry"].iloc[0]
        assert len(list(south_africa.interiors)) == 1
        assert south_africa.area == pytest.approx(96.0)
        kenya = gdf.loc[gdf["country"] == "Kenya", "geometry"].iloc[0]
        assert kenya.area == pytest.approx(25.0)

    def test_boundaries_mixed_name_properties(self, tmp_path):
        from coffee_ratings.reporting import load_boundaries

        gdf = load_boundaries(_write_boundaries(tmp_path / "world.geojson"))
        assert sorted(gdf["country"]) == ["Brazil", "USA"]

    def test_choropleth_fills_matched_countries(self, tmp_path, caplog):
        from coffee_ratings.reporting import load_boundaries, plot_choropleth, save_figure

        gdf = load_boundaries(_write_awkward_boundaries(tmp_path / "world.geojson"))
        summary = pd.DataFrame(
            {"count": [12, 30, 4], "mean_flavor": [7.6, 7.9, 7.4]},
            index=pd.Index(["South Africa", "Kenya", "Ethiopia"], name="country_of_origin"),
        )

        with caplog.at_level("WARNING"):
            fig, name = plot_choropleth(summary, gdf)
        assert name == "map_count.png"
        assert "Ethiopia" in caplog.text

        cbar_axes = [ax for ax in fig.axes if ax is not fig.axes[0]]
        assert len(cbar_axes) == 1
        assert save_figure(fig, tmp_path / "figures" / name).stat().st_size > 0

    def test_choropleth_without_matches(self, tmp_path):
        from coffee_ratings.reporting import load_boundaries, plot_choropleth

        gdf = load_boundaries(_write_awkward_boundaries(tmp_path / "world.geojson"))
        summary = pd.DataFrame({"count": [3]}, index=["Peru"])
        fig, name = plot_choropleth(summary, gdf)
        assert len(fig.axes) == 1

    def test_correlation_heatmap_annotates_finite_cells(self, tmp_path):
        from coffee_ratings.reporting import plot_correlation_heatmap, save_figure

        cols = ["aroma", "flavor", "moisture"]
        corr = pd.DataFrame(
            [[1.0, 0.8, np.nan], [0.8, 1.0, -0.1], [np.nan, -0.1, 1.0]],
            index=cols, columns=cols,
        )
        fig, name = plot_correlation_heatmap(corr)

        assert name == "correlation_matrix.png"
        heat = fig.axes[0]
        labels = sorted(t.get_text() for t in heat.texts)
        assert labels == ["-0.10", "-0.10", "0.80", "0.80", "1.00", "1.00", "1.00"]
        assert fig.axes[1].get_ylabel() == "Pearson r"
        assert save_figure(fig, tmp_path / name).exists()
