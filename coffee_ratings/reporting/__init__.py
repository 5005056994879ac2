"""Figures and Markdown report rendering."""

from .figures import (
    load_boundaries,
    plot_choropleth,
    plot_country_counts,
    plot_correlation_heatmap,
    plot_altitude_flavor,
    plot_residuals,
    save_figure,
)
from .report import build_report, frame_to_markdown, render_model_section

__all__ = [
    "load_boundaries",
    "plot_choropleth",
    "plot_country_counts",
    "plot_correlation_heatmap",
    "plot_altitude_flavor",
    "plot_residuals",
    "save_figure",
    "build_report",
    "frame_to_markdown",
    "render_model_section",
]
