"""
Report figures.

Plots Generated:
  F1: Choropleth of ratings per country (needs a GeoJSON boundary file)
  F2: Bar chart of ratings per country
  F3: Correlation heatmap of the rating columns
  F4: Altitude vs flavor scatter, by species
  F5: Residual diagnostics per model (residuals vs fitted, normal QQ)

Every function returns ``(figure, filename)``; saving is left to the caller.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy import stats

from ..analyses.ols import ModelResult
from ..config import BOUNDARY_NAME_ALIASES

logger = logging.getLogger(__name__)

plt.rcParams.update({
    'font.size': 10,
    'axes.labelsize': 11,
    'axes.titlesize': 12,
    'legend.fontsize': 9,
    'figure.dpi': 100,
    'savefig.dpi': 150,
})

_NAME_PROPERTIES = ("name", "NAME", "ADMIN", "name_long", "admin")


# ============================================================================
# BOUNDARIES
# ============================================================================

def load_boundaries(
    path: Path,
    aliases: Optional[Mapping[str, str]] = None,
):
    """
    Read country boundaries into a GeoDataFrame with a ``country`` column.

    The name is taken from the first non-empty of the usual naming properties
    and mapped back to canonical country labels through the inverse of
    ``aliases`` (defaults to BOUNDARY_NAME_ALIASES).
    """
    import geopandas as gpd

    if aliases is None:
        aliases = BOUNDARY_NAME_ALIASES
    to_canonical = {v: k for k, v in aliases.items()}

    gdf = gpd.read_file(path)
    name_cols = [c for c in _NAME_PROPERTIES if c in gdf.columns]
    if not name_cols:
        raise ValueError(f"No country name property in {Path(path).name}")

    names = gdf[name_cols].replace("", np.nan).bfill(axis=1).iloc[:, 0]
    gdf = gdf.assign(country=names.replace(to_canonical))
    gdf = gdf[gdf["country"].notna() & gdf.geometry.notna() & ~gdf.geometry.is_empty]

    logger.info(
        f"Loaded boundaries for {gdf['country'].nunique()} countries from {Path(path).name}"
    )
    return gdf[["country", "geometry"]].reset_index(drop=True)


# ============================================================================
# FIGURES
# ============================================================================

def plot_choropleth(
    country_summary: pd.DataFrame,
    boundaries,
    value_col: str = "count",
    cmap: str = "YlOrBr",
) -> Tuple[plt.Figure, str]:
    """F1: fill each country by ``value_col``; countries without data in grey."""
    values = country_summary[value_col].dropna()
    merged = boundaries.merge(
        values.rename_axis("country").reset_index(), on="country", how="left"
    )
    label = value_col.replace("_", " ")

    fig, ax = plt.subplots(figsize=(12, 6))
    if merged[value_col].notna().any():
        merged.plot(
            column=value_col,
            cmap=cmap,
            ax=ax,
            legend=True,
            legend_kwds={"label": label, "shrink": 0.6},
            edgecolor="white",
            linewidth=0.3,
            missing_kwds={"color": "lightgray"},
        )
    else:
        merged.plot(ax=ax, color="lightgray", edgecolor="white", linewidth=0.3)
    ax.set_axis_off()

    unmatched = sorted(set(values.index) - set(boundaries["country"]))
    if unmatched:
        logger.warning(f"No boundary for: {unmatched}")

    ax.set_title(f"Coffee ratings by country of origin ({label})")
    plt.tight_layout()
    return fig, f"map_{value_col}.png"


def plot_country_counts(
    country_summary: pd.DataFrame,
    top_n: int = 15,
) -> Tuple[plt.Figure, str]:
    """F2: horizontal bar chart of the most-rated countries."""
    top = country_summary.head(top_n).iloc[::-1]

    fig, ax = plt.subplots(figsize=(8, max(3, 0.35 * len(top))))
    ax.barh(top.index.astype(str), top["count"], color="#6f4e37")
    for y, (count, flavor) in enumerate(zip(top["count"], top["mean_flavor"])):
        ax.text(count, y, f" {count} ({flavor:.2f})", va="center", fontsize=8)
    ax.set_xlabel("Number of rated lots (mean flavor)")
    ax.set_title(f"Top {len(top)} countries by number of ratings")
    plt.tight_layout()
    return fig, "country_counts.png"


def plot_correlation_heatmap(corr: pd.DataFrame) -> Tuple[plt.Figure, str]:
    """F3: annotated Pearson correlation heatmap."""
    import seaborn as sns

    fig, ax = plt.subplots(figsize=(9, 8))
    sns.heatmap(
        corr,
        annot=True,
        fmt=".2f",
        cmap="RdBu_r",
        vmin=-1,
        vmax=1,
        ax=ax,
        annot_kws={"fontsize": 7},
        cbar_kws={"label": "Pearson r", "shrink": 0.8},
    )
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    ax.set_title("Correlation of cupping scores (pairwise complete)")
    plt.tight_layout()
    return fig, "correlation_matrix.png"


def plot_altitude_flavor(df: pd.DataFrame) -> Tuple[plt.Figure, str]:
    """F4: flavor against mean altitude, one colour per species."""
    fig, ax = plt.subplots(figsize=(8, 5))
    data = df.dropna(subset=["altitude_mean_meters", "flavor", "species"])

    for species, group in data.groupby("species"):
        ax.scatter(group["altitude_mean_meters"], group["flavor"], s=10, alpha=0.5, label=species)
        if len(group) > 1 and group["altitude_mean_meters"].nunique() > 1:
            slope, intercept = np.polyfit(group["altitude_mean_meters"], group["flavor"], 1)
            xs = np.linspace(group["altitude_mean_meters"].min(), group["altitude_mean_meters"].max(), 50)
            ax.plot(xs, intercept + slope * xs, linewidth=1.5)

    ax.set_xlabel("Mean altitude (m)")
    ax.set_ylabel("Flavor score")
    ax.set_title("Flavor vs altitude by species")
    ax.legend()
    plt.tight_layout()
    return fig, "altitude_flavor.png"


def plot_residuals(result: ModelResult) -> Tuple[plt.Figure, str]:
    """F5: residuals vs fitted and a normal QQ plot."""
    fig, axes = plt.subplots(1, 2, figsize=(11, 4.5))

    axes[0].scatter(result.fitted, result.residuals, s=8, alpha=0.5)
    axes[0].axhline(0, color="black", linewidth=0.8)
    axes[0].set_xlabel("Fitted values")
    axes[0].set_ylabel("Residuals")
    axes[0].set_title("Residuals vs fitted")

    stats.probplot(result.residuals.to_numpy(), dist="norm", plot=axes[1])
    axes[1].set_title("Normal Q-Q")

    fig.suptitle(f"{result.label}: {result.formula}", fontsize=10)
    plt.tight_layout()
    slug = result.label.lower().replace(" ", "_")
    return fig, f"residuals_{slug}.png"


def save_figure(fig: plt.Figure, path: Path) -> Path:
    """Save and close a figure."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"  Saved figure {path.name}")
    return path
