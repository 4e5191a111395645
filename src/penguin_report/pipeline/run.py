from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import pandas as pd

from ..aggregate import summarize_groups, summary_frame
from ..clean import clean_dataset
from ..dataset import Dataset
from ..ingest import BUNDLED_SOURCE, dataset_profile, load_dataset
from ..modeling import ModelComparison, ModelFit, compare_models, fit_null, fit_species, species_means
from ..models import DatasetError, ModelFitError, OutputManifest
from ..report import ReportConfig, ReportInputs, write_report_html, write_report_markdown
from ..report import plots as plotting
from ..utils import append_json_list, merge_json, now_iso, write_json
from .context import RunContext


@dataclass(frozen=True)
class ModelResults:
    null_fit: ModelFit
    full_fit: ModelFit
    comparison: ModelComparison
    species_means: dict[str, float]


def fit_models(cleaned: Dataset) -> ModelResults:
    """Null and species models, their F-test and the reconstructed species means."""
    null_fit = fit_null(cleaned)
    full_fit = fit_species(cleaned)
    return ModelResults(
        null_fit=null_fit,
        full_fit=full_fit,
        comparison=compare_models(null_fit, full_fit),
        species_means=species_means(full_fit),
    )


@dataclass(frozen=True)
class RunResult:
    run_dir: Path
    report_md: Path
    report_html: Path
    group_summary_csv: Path
    coefficients_csv: Path
    anova_csv: Path
    dataset_profile_json: Path
    analysis_log_json: Path
    plots_dir: Optional[Path] = None

    def manifest(self) -> OutputManifest:
        return OutputManifest(
            run_dir=str(self.run_dir),
            report_md=str(self.report_md),
            report_html=str(self.report_html),
            group_summary_csv=str(self.group_summary_csv),
            coefficients_csv=str(self.coefficients_csv),
            anova_csv=str(self.anova_csv),
            dataset_profile_json=str(self.dataset_profile_json),
            analysis_log_json=str(self.analysis_log_json),
            plots_dir=str(self.plots_dir) if self.plots_dir else None,
        )


def _record_stage(log_path: Path, stage: str, **details: Any) -> None:
    append_json_list(log_path, "stages", {"stage": stage, "at": now_iso(), **details})


def _record_failure(log_path: Path, stage: str, exc: Exception) -> None:
    append_json_list(log_path, "errors", {"stage": stage, "error": f"{type(exc).__name__}: {exc}"})
    merge_json(log_path, {"status": "failed", "finished_at": now_iso()})


def _coefficients_frame(models: ModelResults) -> pd.DataFrame:
    null_df = models.null_fit.coefficients_frame()
    null_df.insert(0, "model", "null")
    full_df = models.full_fit.coefficients_frame()
    full_df.insert(0, "model", "species")
    return pd.concat([null_df, full_df], ignore_index=True)


def _render_plots(
    *,
    ctx: RunContext,
    cleaned: Dataset,
    models: ModelResults,
    config: ReportConfig,
) -> list[str]:
    """Write every plot; a plot that fails is reported as a warning, not raised."""
    out = ctx.plots_dir()
    jobs: list[tuple[str, Callable[[Path], Path]]] = [
        (plotting.HISTOGRAMS_BY_SPECIES, lambda p: plotting.plot_measurement_histograms(cleaned, p, config)),
        (plotting.BODY_MASS_HISTOGRAM, lambda p: plotting.plot_body_mass_histogram(cleaned, p, config)),
        (
            plotting.BODY_MASS_BY_SPECIES,
            lambda p: plotting.plot_body_mass_by_species(cleaned, models.species_means, p, config),
        ),
        (plotting.RESIDUALS_VS_FITTED, lambda p: plotting.plot_residuals_vs_fitted(models.full_fit, p, config)),
        (plotting.RESIDUAL_QQ, lambda p: plotting.plot_residual_qq(models.full_fit, p, config)),
    ]
    warnings: list[str] = []
    for name, render in jobs:
        try:
            render(out / name)
        except (OSError, ValueError, RuntimeError) as e:
            warnings.append(f"Plot {name} was not rendered: {type(e).__name__}: {e}")
    return warnings


def run_pipeline(
    *,
    data: Path | None = None,
    output_root: Path | None = None,
    plots: bool = True,
    config: ReportConfig | None = None,
    run_id: str | None = None,
) -> RunResult:
    """Load, clean, aggregate, fit and render one report run.

    Load and model errors are recorded in analysis_log.json and re-raised;
    nothing is rendered for a run whose analysis failed. Plot failures only
    add warnings.
    """
    cfg = config or ReportConfig()
    ctx = RunContext.create(output_root=output_root, run_id=run_id)
    log_path = ctx.analysis_log_path()
    write_json(
        log_path,
        {
            "run_id": ctx.run_id,
            "created_at": now_iso(),
            "status": "running",
            "data": str(data) if data is not None else BUNDLED_SOURCE,
            "plots": plots,
            "stages": [],
            "warnings": [],
            "errors": [],
        },
    )

    try:
        raw = load_dataset(data)
    except (FileNotFoundError, DatasetError) as e:
        _record_failure(log_path, "load", e)
        raise
    _record_stage(log_path, "load", source=raw.source, rows=len(raw))
    write_json(ctx.dataset_profile_path(), dataset_profile(raw))

    cleaned, cleaning = clean_dataset(raw)
    _record_stage(log_path, "clean", **cleaning.as_dict())

    summaries = summarize_groups(cleaned)
    summary_frame(summaries).to_csv(ctx.group_summary_path(), index=False)
    _record_stage(log_path, "aggregate", groups=len(summaries))

    try:
        models = fit_models(cleaned)
    except ModelFitError as e:
        _record_failure(log_path, "model", e)
        raise
    _coefficients_frame(models).to_csv(ctx.coefficients_path(), index=False)
    models.comparison.anova_frame().to_csv(ctx.anova_path(), index=False)
    _record_stage(
        log_path,
        "model",
        nobs=models.full_fit.nobs,
        f_statistic=models.comparison.f_statistic,
        df_num=models.comparison.df_num,
        df_den=models.comparison.df_den,
        p_value=models.comparison.p_value,
        adj_r_squared=models.full_fit.adj_r_squared,
        species_means=models.species_means,
    )

    warnings: list[str] = []
    if plots:
        warnings = _render_plots(ctx=ctx, cleaned=cleaned, models=models, config=cfg)
        for w in warnings:
            append_json_list(log_path, "warnings", w)
        _record_stage(log_path, "plots", rendered=sorted(p.name for p in ctx.plots_dir().glob("*.png")))

    inputs = ReportInputs(
        source=raw.source,
        cleaning=cleaning,
        summaries=summaries,
        null_fit=models.null_fit,
        full_fit=models.full_fit,
        comparison=models.comparison,
        species_means=models.species_means,
        plots_dir=ctx.plots_dir(),
        run_id=ctx.run_id,
        warnings=tuple(warnings),
    )
    write_report_markdown(inputs, ctx.report_md_path())
    write_report_html(inputs, ctx.report_html_path())
    _record_stage(log_path, "report")
    merge_json(log_path, {"status": "success", "finished_at": now_iso()})

    return RunResult(
        run_dir=ctx.run_dir,
        report_md=ctx.report_md_path(),
        report_html=ctx.report_html_path(),
        group_summary_csv=ctx.group_summary_path(),
        coefficients_csv=ctx.coefficients_path(),
        anova_csv=ctx.anova_path(),
        dataset_profile_json=ctx.dataset_profile_path(),
        analysis_log_json=log_path,
        plots_dir=ctx.plots_dir() if plots else None,
    )
