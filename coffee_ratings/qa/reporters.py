"""
QA report generation for the cleaned ratings table.

Produces qa_report.md with validation checks and missingness rates.
"""

import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime
import logging

from .validators import validate_cleaned_ratings, ValidationResult

logger = logging.getLogger(__name__)


def compute_missingness(df: pd.DataFrame) -> Dict[str, float]:
    """Compute missingness rate for each column."""
    return {
        col: df[col].isna().mean()
        for col in df.columns
    }


def render_validation_table(results: List[ValidationResult]) -> str:
    """Markdown table of validation results."""
    lines = [
        "| Check | Status | Details |",
        "|-------|--------|---------|",
    ]
    for v in results:
        status = "✅ Pass" if v.passed else "⚠️ Flag"
        lines.append(f"| {v.check_name} | {status} | {v.message} |")
    return "\n".join(lines)


def render_missingness_table(df: pd.DataFrame, min_rate: float = 0.0) -> str:
    """Markdown table of columns with missingness above ``min_rate``."""
    missing = sorted(
        [(k, v) for k, v in compute_missingness(df).items() if v > min_rate],
        key=lambda x: x[1],
        reverse=True,
    )
    if not missing:
        return "No missing values."
    lines = [
        "| Column | Missing Rate |",
        "|--------|--------------|",
    ]
    for col, rate in missing:
        lines.append(f"| {col} | {rate:.1%} |")
    return "\n".join(lines)


def generate_qa_report(
    df: pd.DataFrame,
    output_path: Optional[Path] = None,
) -> str:
    """
    Generate the QA report for a cleaned ratings table.

    Returns:
        Markdown report string (also written to ``output_path`` if given)
    """
    sections = []

    sections.append(f"""# Data Quality Assurance Report

Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}

- **Cleaned rows**: {len(df):,}
- **Countries**: {df['country_of_origin'].nunique() if 'country_of_origin' in df.columns else 'N/A'}
""")

    sections.append("## Validation Checks\n")
    sections.append(render_validation_table(validate_cleaned_ratings(df)))

    sections.append("\n## Missingness Summary\n")
    sections.append(render_missingness_table(df))

    report = "\n".join(sections) + "\n"

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            f.write(report)
        logger.info(f"Generated QA report: {output_path}")

    return report
