from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import matplotlib.pyplot as plt
import numpy as np
import statsmodels.api as sm

from ..dataset import Dataset
from ..modeling import ModelFit
from ..models import MEASUREMENT_COLUMNS, PREDICTOR, RESPONSE

HISTOGRAMS_BY_SPECIES = "histograms_by_species.png"
BODY_MASS_HISTOGRAM = "body_mass_histogram.png"
BODY_MASS_BY_SPECIES = "body_mass_by_species.png"
RESIDUALS_VS_FITTED = "residuals_vs_fitted.png"
RESIDUAL_QQ = "residual_qq.png"


@dataclass(frozen=True)
class ReportConfig:
    """Presentation settings for plots."""

    dpi: int = 120
    hist_bins: int = 30
    jitter_width: float = 0.2
    jitter_seed: int = 42
    mean_marker_size: float = 120.0


def save_figure(fig: Any, path: Path, *, dpi: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight", dpi=dpi)
    plt.close(fig)
    return path


def _label(col: str) -> str:
    return col.replace("_", " ")


def plot_measurement_histograms(dataset: Dataset, out_path: Path, config: ReportConfig) -> Path:
    """One panel per measurement, species overlaid."""
    df = dataset.frame()
    species = dataset.distinct(PREDICTOR)
    fig, axes = plt.subplots(2, 2, figsize=(11, 8))
    for ax, col in zip(axes.ravel(), MEASUREMENT_COLUMNS):
        for sp in species:
            values = df.loc[df[PREDICTOR] == sp, col].dropna().to_numpy(dtype=float)
            ax.hist(values, bins=config.hist_bins, alpha=0.5, label=sp)
        ax.set_title(_label(col))
        ax.set_xlabel(_label(col))
        ax.set_ylabel("Count")
    axes.ravel()[0].legend(title=PREDICTOR)
    fig.suptitle("Measurements by species")
    return save_figure(fig, out_path, dpi=config.dpi)


def plot_body_mass_histogram(dataset: Dataset, out_path: Path, config: ReportConfig) -> Path:
    values = dataset.column(RESPONSE).dropna().to_numpy(dtype=float)
    fig, ax = plt.subplots()
    ax.hist(values, bins=config.hist_bins)
    ax.set_title("Distribution: body mass")
    ax.set_xlabel(_label(RESPONSE))
    ax.set_ylabel("Count")
    return save_figure(fig, out_path, dpi=config.dpi)


def plot_body_mass_by_species(
    dataset: Dataset,
    means: Mapping[str, float],
    out_path: Path,
    config: ReportConfig,
) -> Path:
    """Jittered body masses per species with the species mean marked."""
    df = dataset.frame()
    levels = list(means) or dataset.distinct(PREDICTOR)
    rng = np.random.default_rng(config.jitter_seed)

    fig, ax = plt.subplots(figsize=(8, 5))
    for i, sp in enumerate(levels):
        values = df.loc[df[PREDICTOR] == sp, RESPONSE].dropna().to_numpy(dtype=float)
        x = i + rng.uniform(-config.jitter_width, config.jitter_width, size=values.size)
        ax.scatter(x, values, alpha=0.5, s=14)
    ax.scatter(
        range(len(levels)),
        [means[sp] for sp in levels],
        marker="D",
        s=config.mean_marker_size,
        color="black",
        zorder=3,
        label="species mean",
    )
    ax.set_xticks(range(len(levels)))
    ax.set_xticklabels(levels)
    ax.set_xlabel(PREDICTOR)
    ax.set_ylabel(_label(RESPONSE))
    ax.set_title("Body mass by species")
    ax.legend()
    return save_figure(fig, out_path, dpi=config.dpi)


def plot_residuals_vs_fitted(fit: ModelFit, out_path: Path, config: ReportConfig) -> Path:
    fig, ax = plt.subplots()
    ax.scatter(fit.fitted, fit.residuals, alpha=0.5, s=14)
    ax.axhline(0.0, color="grey", linestyle="--")
    ax.set_title("Residuals vs fitted")
    ax.set_xlabel("Fitted values")
    ax.set_ylabel("Residuals")
    return save_figure(fig, out_path, dpi=config.dpi)


def plot_residual_qq(fit: ModelFit, out_path: Path, config: ReportConfig) -> Path:
    fig, ax = plt.subplots()
    sm.qqplot(np.asarray(fit.residuals), line="s", ax=ax)
    ax.set_title("Normal Q-Q of residuals")
    return save_figure(fig, out_path, dpi=config.dpi)
