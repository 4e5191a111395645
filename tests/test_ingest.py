from __future__ import annotations

from pathlib import Path

import pytest

from penguin_report.ingest import dataset_profile, load_dataset
from penguin_report.models import COLUMNS, DatasetError

FIXTURES = Path(__file__).parent / "fixtures"


def test_load_fixture_keeps_rows_and_order() -> None:
    ds = load_dataset(FIXTURES / "penguins_small.csv")

    assert len(ds) == 25
    assert ds.columns == list(COLUMNS)
    assert ds.source.endswith("penguins_small.csv")
    species = ds.column("species").tolist()
    assert species[0] == "Adelie"
    assert species[-1] == "Chinstrap"


def test_na_strings_become_missing_values() -> None:
    ds = load_dataset(FIXTURES / "penguins_small.csv")
    obs = list(ds.observations())

    all_missing = obs[3]
    assert all_missing.species == "Adelie"
    assert all_missing.bill_length_mm is None
    assert all_missing.body_mass_g is None
    assert all_missing.sex is None
    assert all_missing.year == 2007

    assert obs[12].sex is None
    assert obs[12].body_mass_g == pytest.approx(3475.0)


def test_bundled_dataset_loads() -> None:
    ds = load_dataset()

    assert len(ds) == 344
    assert ds.source == "palmerpenguins"
    assert ds.distinct("species") == ["Adelie", "Chinstrap", "Gentoo"]
    assert set(ds.distinct("sex")) == {"female", "male"}


def test_missing_file_raises_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_dataset(tmp_path / "nope.csv")


def test_missing_column_aborts_load() -> None:
    with pytest.raises(DatasetError) as ei:
        load_dataset(FIXTURES / "penguins_missing_column.csv")
    assert "body_mass_g" in str(ei.value)


def test_non_numeric_measurement_aborts_load() -> None:
    with pytest.raises(DatasetError) as ei:
        load_dataset(FIXTURES / "penguins_malformed.csv")
    msg = str(ei.value)
    assert "body_mass_g" in msg
    assert "'heavy'" in msg
    assert "row 2" in msg


def test_empty_file_aborts_load(tmp_path: Path) -> None:
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(DatasetError):
        load_dataset(empty)


def test_header_only_file_aborts_load(tmp_path: Path) -> None:
    header_only = tmp_path / "header.csv"
    header_only.write_text(",".join(COLUMNS) + "\n", encoding="utf-8")
    with pytest.raises(DatasetError) as ei:
        load_dataset(header_only)
    assert "no rows" in str(ei.value)


def test_unknown_sex_value_aborts_load(tmp_path: Path) -> None:
    path = tmp_path / "sex.csv"
    path.write_text(
        ",".join(COLUMNS) + "\n" + "Adelie,Dream,39.1,18.7,181,3750,unknown,2007\n",
        encoding="utf-8",
    )
    with pytest.raises(DatasetError) as ei:
        load_dataset(path)
    assert "sex" in str(ei.value)


def test_sex_is_normalized_to_lower_case(tmp_path: Path) -> None:
    path = tmp_path / "upper.csv"
    path.write_text(
        ",".join(COLUMNS) + "\n" + "Adelie,Dream,39.1,18.7,181,3750, MALE ,2007\n",
        encoding="utf-8",
    )
    ds = load_dataset(path)
    assert ds.column("sex").tolist() == ["male"]


def test_fractional_year_aborts_load(tmp_path: Path) -> None:
    path = tmp_path / "year.csv"
    path.write_text(
        ",".join(COLUMNS) + "\n" + "Adelie,Dream,39.1,18.7,181,3750,male,2007.5\n",
        encoding="utf-8",
    )
    with pytest.raises(DatasetError):
        load_dataset(path)


def test_dataset_is_read_only_through_accessors() -> None:
    ds = load_dataset(FIXTURES / "penguins_small.csv")
    frame = ds.frame()
    frame.loc[0, "body_mass_g"] = -1.0

    assert ds.column("body_mass_g").iloc[0] == pytest.approx(3750.0)


def test_dataset_profile_counts_missing_values() -> None:
    ds = load_dataset(FIXTURES / "penguins_small.csv")
    profile = dataset_profile(ds)

    assert profile["row_count"] == 25
    assert profile["column_count"] == len(COLUMNS)
    assert profile["missingness"]["body_mass_g"] == 1
    assert profile["missingness"]["sex"] == 2
    assert profile["species_counts"] == {"Adelie": 13, "Chinstrap": 6, "Gentoo": 6}
    assert len(profile["sha256"]) == 64
