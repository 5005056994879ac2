"""
Stage 5: Report Output

Writes the analysis outputs under the configured output directory:
    - tables/*.csv         Group summaries, correlation matrix, coefficients, VIF
    - figures/*.png        Map (when a boundary file is configured), bar chart,
                           heatmap, altitude scatter, residual diagnostics
    - coffee_report.md     Markdown report
    - qa_report.md         Data quality checks and missingness
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from ..config import PipelineConfig

logger = logging.getLogger(__name__)


def write_tables(aggregates: dict, models: dict, tables_dir: Path) -> list:
    """Write aggregate and model tables as CSV."""
    from ..utils.io import save_csv

    written = []
    for name in ("country_summary", "species", "region_summary", "processing_summary",
                 "ratings_summary", "correlation", "pairwise_counts"):
        if name in aggregates:
            written.append(save_csv(aggregates[name], tables_dir / f"{name}.csv", index=True))

    if models:
        coefs = pd.DataFrame([rec for r in models.values() for rec in r.to_records()])
        written.append(save_csv(coefs, tables_dir / "model_coefficients.csv", index=False))

        fit = pd.DataFrame([
            {
                "model": r.label,
                "formula": r.formula,
                "n_obs": r.n_obs,
                "df_resid": r.df_resid,
                "r_squared": r.r_squared,
                "adj_r_squared": r.adj_r_squared,
                "sigma": r.sigma,
            }
            for r in models.values()
        ])
        written.append(save_csv(fit, tables_dir / "model_fit.csv", index=False))

        vif = pd.concat(
            [r.vif.rename("vif").to_frame().assign(model=r.label) for r in models.values()]
        )
        vif.index.name = "term"
        written.append(save_csv(vif.reset_index()[["model", "term", "vif"]],
                                tables_dir / "model_vif.csv", index=False))
    return written


def write_figures(
    cleaned: pd.DataFrame,
    aggregates: dict,
    models: dict,
    cfg: PipelineConfig,
    figures_dir: Path,
) -> Dict[str, Path]:
    """Render every figure; returns paths keyed by report section."""
    from ..reporting import (
        load_boundaries,
        plot_altitude_flavor,
        plot_choropleth,
        plot_correlation_heatmap,
        plot_country_counts,
        plot_residuals,
        save_figure,
    )

    figures = {}
    summary = aggregates["country_summary"]

    if cfg.boundaries_path:
        boundaries = load_boundaries(Path(cfg.boundaries_path))
        fig, name = plot_choropleth(summary, boundaries)
        figures["map"] = save_figure(fig, figures_dir / name)
    else:
        logger.warning("  No boundary file configured, skipping map")

    fig, name = plot_country_counts(summary, top_n=cfg.top_n_countries)
    figures["country_counts"] = save_figure(fig, figures_dir / name)

    fig, name = plot_correlation_heatmap(aggregates["correlation"])
    figures["correlation_matrix"] = save_figure(fig, figures_dir / name)

    fig, name = plot_altitude_flavor(cleaned)
    figures["altitude_flavor"] = save_figure(fig, figures_dir / name)

    for label, result in models.items():
        fig, name = plot_residuals(result)
        figures[f"residuals_{label}"] = save_figure(fig, figures_dir / name)

    return figures


def run_report(
    cleaned: pd.DataFrame,
    aggregates: dict,
    model_results: dict,
    cfg: Optional[PipelineConfig] = None,
    raw_rows: Optional[int] = None,
) -> dict:
    """
    Run the report stage.

    Args:
        cleaned: Cleaned ratings table
        aggregates: Output of stage 3
        model_results: Output of stage 4
        cfg: Pipeline configuration
        raw_rows: Row count of the raw table, for the report header

    Returns:
        dict: Paths of the written tables, figures and reports
    """
    from ..qa import generate_qa_report, validate_cleaned_ratings
    from ..reporting import build_report

    cfg = cfg or PipelineConfig()
    out = cfg.output_path

    logger.info("=" * 60)
    logger.info("STAGE 5: REPORT OUTPUT")
    logger.info("=" * 60)

    models = model_results.get("models", {})
    errors = model_results.get("errors", {})

    tables = write_tables(aggregates, models, out / "tables")
    logger.info(f"  Wrote {len(tables)} tables")

    figures = {}
    if cfg.make_figures:
        figures = write_figures(cleaned, aggregates, models, cfg, out / "figures")

    validations = validate_cleaned_ratings(cleaned, cleaning=cfg.cleaning_config())
    for v in validations:
        if not v.passed:
            logger.warning(f"  QA flag {v.check_name}: {v.message}")

    report_path = out / "coffee_report.md"
    build_report(
        cleaned,
        raw_rows,
        aggregates["country_summary"],
        aggregates["species"],
        aggregates["correlation"],
        models,
        errors,
        validations,
        figures=figures,
        top_n=cfg.top_n_countries,
        output_path=report_path,
    )

    qa_path = out / "qa_report.md"
    generate_qa_report(cleaned, output_path=qa_path)

    return {
        "tables": tables,
        "figures": figures,
        "report": report_path,
        "qa_report": qa_path,
    }
