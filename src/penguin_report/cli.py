from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from .aggregate import summarize_groups, summary_frame
from .clean import clean_dataset
from .ingest import load_dataset
from .pipeline import fit_models, run_pipeline
from .report.markdown import anova_table, coefficient_table

app = typer.Typer(add_completion=False, help="Penguin body-mass report: group means and a species linear model.")

DATA_OPTION = typer.Option(None, "--data", help="CSV with the palmerpenguins columns (default: bundled dataset)")


def _exit_code(exc: Exception) -> int:
    # 2: missing input, 1: invalid data or a model that cannot be fitted.
    return 2 if isinstance(exc, FileNotFoundError) else 1


@app.command()
def run(
    data: Optional[Path] = DATA_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", help="Root directory for run folders (default: ./reports)"),
    plots: str = typer.Option("on", "--plots", help="on|off"),
):
    """
    Run the full report: load, clean, aggregate, fit both models, render.

    Writes report.md, report.html, group_summary.csv, coefficients.csv,
    anova.csv, dataset_profile.json, analysis_log.json and plots/.
    """
    plots_on = plots.strip().lower() != "off"
    try:
        result = run_pipeline(data=data, output_root=output, plots=plots_on)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=_exit_code(e))

    typer.echo("Run complete.")
    typer.echo(f"Run dir: {result.run_dir}")
    typer.echo(f"Report: {result.report_md}")
    typer.echo(f"HTML: {result.report_html}")
    typer.echo(f"Group summary: {result.group_summary_csv}")
    typer.echo(f"Coefficients: {result.coefficients_csv}")
    typer.echo(f"ANOVA: {result.anova_csv}")
    typer.echo(f"Log: {result.analysis_log_json}")
    if result.plots_dir:
        typer.echo(f"Plots: {result.plots_dir}")


@app.command()
def summary(data: Optional[Path] = DATA_OPTION):
    """
    Print mean measurements per species, island and sex.
    """
    try:
        cleaned, outcome = clean_dataset(load_dataset(data))
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=_exit_code(e))

    typer.echo(f"Rows: {outcome.rows_in} loaded, {outcome.rows_dropped} dropped, {outcome.rows_out} used")
    typer.echo(summary_frame(summarize_groups(cleaned)).to_string(index=False, float_format=lambda v: f"{v:.2f}"))


@app.command()
def model(data: Optional[Path] = DATA_OPTION):
    """
    Print both coefficient tables, the F-test and the per-species means.
    """
    try:
        cleaned, _ = clean_dataset(load_dataset(data))
        models = fit_models(cleaned)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=_exit_code(e))

    typer.echo("Null model: body_mass_g ~ 1")
    typer.echo(coefficient_table(models.null_fit).to_string(index=False))
    typer.echo("")
    typer.echo("Species model: body_mass_g ~ species")
    typer.echo(coefficient_table(models.full_fit).to_string(index=False))
    typer.echo(f"Adjusted R-squared: {models.full_fit.adj_r_squared:.4f}")
    typer.echo("")
    typer.echo("Model comparison")
    typer.echo(anova_table(models.comparison).to_string(index=False, na_rep=""))
    typer.echo("")
    typer.echo("Species means")
    for species, mean in models.species_means.items():
        typer.echo(f"  {species}: {mean:.2f}")
