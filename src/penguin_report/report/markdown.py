from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import pandas as pd

from ..aggregate import GroupSummary, summary_frame
from ..clean import CleaningOutcome
from ..modeling import ModelComparison, ModelFit
from . import plots as plot_names

REPORT_TITLE = "Body Mass of Palmer Penguins"

PLOT_CAPTIONS: dict[str, str] = {
    plot_names.HISTOGRAMS_BY_SPECIES: "Measurements by species",
    plot_names.BODY_MASS_HISTOGRAM: "Distribution of body mass",
    plot_names.BODY_MASS_BY_SPECIES: "Body mass by species with species means",
    plot_names.RESIDUALS_VS_FITTED: "Residuals vs fitted values",
    plot_names.RESIDUAL_QQ: "Normal Q-Q plot of residuals",
}
DISTRIBUTION_PLOTS = (
    plot_names.HISTOGRAMS_BY_SPECIES,
    plot_names.BODY_MASS_HISTOGRAM,
    plot_names.BODY_MASS_BY_SPECIES,
)
DIAGNOSTIC_PLOTS = (plot_names.RESIDUALS_VS_FITTED, plot_names.RESIDUAL_QQ)


@dataclass(frozen=True)
class ReportInputs:
    source: str
    cleaning: CleaningOutcome
    summaries: Sequence[GroupSummary]
    null_fit: ModelFit
    full_fit: ModelFit
    comparison: ModelComparison
    species_means: Mapping[str, float]
    plots_dir: Path
    run_id: str = ""
    warnings: Sequence[str] = field(default_factory=tuple)

    def available_plots(self, names: Sequence[str]) -> list[str]:
        if not self.plots_dir.is_dir():
            return []
        return [n for n in names if (self.plots_dir / n).is_file()]


def format_p(p: float) -> str:
    if p < 1e-4:
        return "< 0.0001"
    return f"{p:.4f}"


def format_cell(value: Any, digits: int) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        return f"{value:.{digits}f}"
    return str(value)


def markdown_table(df: pd.DataFrame, *, digits: int = 2) -> str:
    cols = [str(c) for c in df.columns]
    lines = ["| " + " | ".join(cols) + " |", "|" + "|".join(["---"] * len(cols)) + "|"]
    for row in df.itertuples(index=False):
        lines.append("| " + " | ".join(format_cell(v, digits) for v in row) + " |")
    return "\n".join(lines) + "\n"


def coefficient_table(fit: ModelFit) -> pd.DataFrame:
    df = fit.coefficients_frame()
    df["p_value"] = df["p_value"].map(format_p)
    return df


def p_phrase(p: float) -> str:
    s = format_p(p)
    return f"p {s}" if s.startswith("<") else f"p = {s}"


def anova_table(comparison: ModelComparison) -> pd.DataFrame:
    c = comparison
    return pd.DataFrame(
        [
            {"model": "body_mass_g ~ 1", "res_df": str(c.df_resid_null), "rss": c.rss_null,
             "df": None, "sum_of_sq": None, "f": None, "p_value": None},
            {"model": "body_mass_g ~ species", "res_df": str(c.df_resid_full), "rss": c.rss_full,
             "df": str(c.df_num), "sum_of_sq": c.rss_null - c.rss_full,
             "f": c.f_statistic, "p_value": format_p(c.p_value)},
        ],
        columns=["model", "res_df", "rss", "df", "sum_of_sq", "f", "p_value"],
    )


def species_means_table(inputs: ReportInputs) -> pd.DataFrame:
    coding = inputs.full_fit.coding
    reference = coding.reference if coding is not None else ""
    return pd.DataFrame(
        [
            {"species": sp, "mean_body_mass_g": m, "reference": "yes" if sp == reference else ""}
            for sp, m in inputs.species_means.items()
        ],
        columns=["species", "mean_body_mass_g", "reference"],
    )


def data_paragraph(inputs: ReportInputs) -> str:
    c = inputs.cleaning
    return (
        f"The penguins table ({inputs.source}) holds {c.rows_in} observations. "
        f"{c.rows_dropped} of them have at least one missing value and were removed, "
        f"leaving {c.rows_out} observations for the analysis."
    )


def groups_paragraph(inputs: ReportInputs) -> str:
    if not inputs.summaries:
        return "No group has a complete observation."
    heaviest = max(inputs.summaries, key=lambda s: s.body_mass_g)
    lightest = min(inputs.summaries, key=lambda s: s.body_mass_g)
    k = heaviest.key
    l = lightest.key
    return (
        f"Grouping by species, island and sex gives {len(inputs.summaries)} groups. "
        f"The heaviest group on average is {k.sex} {k.species} penguins on {k.island} "
        f"({heaviest.body_mass_g:.0f} g, n = {heaviest.n}); the lightest is {l.sex} {l.species} "
        f"penguins on {l.island} ({lightest.body_mass_g:.0f} g, n = {lightest.n})."
    )


def model_paragraph(inputs: ReportInputs) -> str:
    cmp = inputs.comparison
    full = inputs.full_fit
    return (
        f"The null model estimates a common mean body mass of {inputs.null_fit.intercept:.1f} g. "
        f"Adding species lowers the residual sum of squares from {cmp.rss_null:,.0f} to {cmp.rss_full:,.0f} "
        f"(F = {cmp.f_statistic:.2f} on {cmp.df_num} and {cmp.df_den} degrees of freedom, "
        f"{p_phrase(cmp.p_value)}). "
        f"The species model has an adjusted R² of {full.adj_r_squared:.3f} and a residual standard error of "
        f"{full.residual_std_error:.1f} g on {full.df_resid} degrees of freedom."
    )


def means_paragraph(inputs: ReportInputs) -> str:
    coding = inputs.full_fit.coding
    if coding is None or not inputs.species_means:
        return ""
    ref = coding.reference
    others = [
        f"{sp} {m:.1f} g (intercept {inputs.full_fit.intercept:+.1f} and coefficient "
        f"{inputs.full_fit.coefficient(coding.term(sp)).estimate:+.1f})"
        for sp, m in inputs.species_means.items()
        if sp != ref
    ]
    text = f"{ref} is the reference species, so its mean body mass is the intercept, {inputs.species_means[ref]:.1f} g."
    if others:
        text += " The other species means are " + "; ".join(others) + "."
    return text


def build_report_markdown(inputs: ReportInputs) -> str:
    lines: list[str] = []
    lines.append(f"# {REPORT_TITLE}\n")
    if inputs.run_id:
        lines.append(f"\n_Run {inputs.run_id}_\n")

    lines.append("\n## Data\n\n")
    lines.append(data_paragraph(inputs) + "\n")

    lines.append("\n## Group Means\n\n")
    lines.append(groups_paragraph(inputs) + "\n\n")
    lines.append(markdown_table(summary_frame(inputs.summaries), digits=1))

    distribution = inputs.available_plots(DISTRIBUTION_PLOTS)
    if distribution:
        lines.append("\n## Distributions\n\n")
        for name in distribution:
            lines.append(f"![{PLOT_CAPTIONS[name]}](plots/{name})\n\n")

    lines.append("\n## Linear Model\n\n")
    lines.append(model_paragraph(inputs) + "\n")
    lines.append("\n### Null model: body_mass_g ~ 1\n\n")
    lines.append(markdown_table(coefficient_table(inputs.null_fit), digits=2))
    lines.append("\n### Species model: body_mass_g ~ species\n\n")
    lines.append(markdown_table(coefficient_table(inputs.full_fit), digits=2))
    lines.append("\n### Model comparison\n\n")
    lines.append(markdown_table(anova_table(inputs.comparison), digits=2))
    lines.append("\n### Species means\n\n")
    lines.append(means_paragraph(inputs) + "\n\n")
    lines.append(markdown_table(species_means_table(inputs), digits=1))

    diagnostics = inputs.available_plots(DIAGNOSTIC_PLOTS)
    if diagnostics:
        lines.append("\n## Diagnostics\n\n")
        for name in diagnostics:
            lines.append(f"![{PLOT_CAPTIONS[name]}](plots/{name})\n\n")

    if inputs.warnings:
        lines.append("\n## Warnings\n\n")
        lines.extend(f"- {w}\n" for w in inputs.warnings)

    lines.append("\n## Artifacts\n\n")
    for name in ("report.html", "group_summary.csv", "coefficients.csv", "anova.csv",
                 "dataset_profile.json", "analysis_log.json"):
        lines.append(f"- {name}\n")

    return "".join(lines)


def write_report_markdown(inputs: ReportInputs, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(build_report_markdown(inputs), encoding="utf-8")
    return output_path
