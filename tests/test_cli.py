from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from penguin_report.cli import app

FIXTURES = Path(__file__).parent / "fixtures"

runner = CliRunner()


def test_run_command_prints_artifact_paths(tmp_path: Path) -> None:
    res = runner.invoke(
        app,
        ["run", "--data", str(FIXTURES / "penguins_small.csv"), "--output", str(tmp_path), "--plots", "off"],
    )

    assert res.exit_code == 0, res.output
    assert "Run complete." in res.stdout
    assert "Report:" in res.stdout
    assert "Plots:" not in res.stdout
    runs = [p for p in tmp_path.iterdir() if p.is_dir()]
    assert len(runs) == 1
    assert (runs[0] / "report.md").exists()


def test_summary_command_prints_groups() -> None:
    res = runner.invoke(app, ["summary", "--data", str(FIXTURES / "penguins_small.csv")])

    assert res.exit_code == 0, res.output
    assert "25 loaded, 2 dropped, 23 used" in res.stdout
    assert "Torgersen" in res.stdout
    assert "body_mass_g" in res.stdout


def test_model_command_prints_tables_and_means() -> None:
    res = runner.invoke(app, ["model", "--data", str(FIXTURES / "penguins_small.csv")])

    assert res.exit_code == 0, res.output
    assert "species[T.Gentoo]" in res.stdout
    assert "Model comparison" in res.stdout
    assert "Adelie:" in res.stdout


def test_missing_data_file_exits_with_code_2(tmp_path: Path) -> None:
    res = runner.invoke(app, ["summary", "--data", str(tmp_path / "missing.csv")])
    assert res.exit_code == 2


def test_invalid_data_exits_with_code_1(tmp_path: Path) -> None:
    res = runner.invoke(
        app,
        ["run", "--data", str(FIXTURES / "penguins_malformed.csv"), "--output", str(tmp_path)],
    )
    assert res.exit_code == 1
