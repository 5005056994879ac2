"""
Markdown report for the coffee ratings analysis.

Assembles the dataset summary, group tables, correlation matrix, model
coefficient tables and QA checks into coffee_report.md.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from ..aggregation.country_summary import top_countries
from ..analyses.ols import ModelResult
from ..analyses.vif import VIF_THRESHOLD, flag_high_vif
from ..qa.reporters import render_validation_table
from ..qa.validators import ValidationResult
from ..utils.regression import significance_stars

logger = logging.getLogger(__name__)


def _fmt(value, digits: int = 3) -> str:
    if value is None:
        return ""
    if isinstance(value, (float, np.floating)):
        if np.isnan(value):
            return "NA"
        if np.isinf(value):
            return "inf"
        return f"{value:,.{digits}f}"
    if isinstance(value, (int, np.integer)):
        return f"{value:,}"
    return str(value)


def frame_to_markdown(df: pd.DataFrame, digits: int = 3, index: bool = True) -> str:
    """Render a DataFrame as a GitHub-flavoured Markdown table."""
    headers = ([df.index.name or ""] if index else []) + [str(c) for c in df.columns]
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join(["---"] * len(headers)) + "|",
    ]
    for row in df.itertuples(index=True, name=None):
        idx, values = row[0], row[1:]
        cells = ([_fmt(idx, digits)] if index else []) + [_fmt(v, digits) for v in values]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


def render_model_section(result: ModelResult) -> str:
    """Coefficient table, fit statistics and VIF flags for one model."""
    lines = [
        f"### {result.label}",
        "",
        f"`{result.formula}`",
        "",
        f"N = {result.n_obs:,}, R² = {result.r_squared:.4f}, "
        f"adjusted R² = {result.adj_r_squared:.4f}, residual SE = {result.sigma:.4f}",
        "",
        "| Term | Estimate | Std. Error | t | p | VIF |",
        "|------|----------|------------|---|---|-----|",
    ]
    for t in result.terms:
        vif = result.vif.get(t.name)
        lines.append(
            f"| {t.name} | {t.estimate:.4f}{significance_stars(t.p_value)} | "
            f"{t.std_error:.4f} | {t.t_stat:.2f} | {t.p_value:.4f} | {_fmt(vif, 2)} |"
        )

    high = flag_high_vif(result.vif)
    lines.append("")
    if len(high) > 0:
        lines.append(
            f"VIF above {VIF_THRESHOLD:g}: "
            + ", ".join(f"{name} ({v:.1f})" for name, v in high.items())
        )
    else:
        lines.append(f"No predictor has a VIF above {VIF_THRESHOLD:g}.")
    lines.append("")
    lines.append("Significance: *** p<0.01, ** p<0.05, * p<0.10")
    return "\n".join(lines)


def build_report(
    cleaned: pd.DataFrame,
    raw_rows: Optional[int],
    country_summary: pd.DataFrame,
    species: pd.DataFrame,
    corr: pd.DataFrame,
    models: Mapping[str, ModelResult],
    model_errors: Mapping[str, str],
    validations: List[ValidationResult],
    figures: Optional[Dict[str, Path]] = None,
    top_n: int = 15,
    output_path: Optional[Path] = None,
) -> str:
    """
    Compose the Markdown report.

    Returns:
        Markdown string (also written to ``output_path`` if given)
    """
    figures = figures or {}
    sections = []

    def link(key: str) -> str:
        path = Path(figures[key])
        target = os.path.relpath(path, output_path.parent) if output_path is not None else path.name
        return f"\n![{key}]({Path(target).as_posix()})"

    dropped = f" ({raw_rows - len(cleaned):,} dropped from {raw_rows:,} raw rows)" if raw_rows else ""
    sections.append(f"""# Coffee Quality Ratings Report

Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}

- **Rated lots**: {len(cleaned):,}{dropped}
- **Countries**: {cleaned['country_of_origin'].nunique()}
- **Lots with altitude**: {cleaned['altitude_mean_meters'].notna().sum():,}
""")

    sections.append("## Species\n")
    sections.append(frame_to_markdown(species, digits=2))

    sections.append(f"\n## Top {min(top_n, len(country_summary))} Countries\n")
    sections.append(frame_to_markdown(top_countries(country_summary, top_n), digits=3))
    for key in ("map", "country_counts"):
        if key in figures:
            sections.append(link(key))

    sections.append("\n## Correlation of Cupping Scores\n")
    sections.append(frame_to_markdown(corr, digits=2))
    if "correlation_matrix" in figures:
        sections.append(link("correlation_matrix"))

    sections.append("\n## Regression Models\n")
    for label, result in models.items():
        sections.append(render_model_section(result))
        key = f"residuals_{label}"
        if key in figures:
            sections.append(link(key))
        sections.append("")
    for label, message in model_errors.items():
        sections.append(f"### {label}\n\nNot estimated: {message}\n")

    sections.append("## Data Quality Checks\n")
    sections.append(render_validation_table(validations))

    report = "\n".join(sections) + "\n"

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report)
        logger.info(f"Generated report: {output_path}")

    return report
