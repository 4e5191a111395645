from __future__ import annotations

from pathlib import Path

import pytest

from penguin_report.clean import clean_dataset, drop_incomplete
from penguin_report.dataset import Dataset
from penguin_report.ingest import load_dataset
from penguin_report.models import MEASUREMENT_COLUMNS, DatasetError

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture()
def raw():
    return load_dataset(FIXTURES / "penguins_small.csv")


def test_drops_rows_with_any_missing_field(raw) -> None:
    cleaned, outcome = clean_dataset(raw)

    assert outcome.rows_in == 25
    assert outcome.rows_out == 23
    assert outcome.rows_dropped == 2
    assert len(cleaned) == 23
    assert not cleaned.frame().isna().any().any()


def test_cleaning_preserves_order(raw) -> None:
    cleaned = drop_incomplete(raw)

    expected = raw.frame().dropna()["body_mass_g"].tolist()
    assert cleaned.column("body_mass_g").tolist() == expected


def test_measurements_only_keeps_rows_missing_sex(raw) -> None:
    cleaned = drop_incomplete(raw, MEASUREMENT_COLUMNS)

    assert len(cleaned) == 24
    assert cleaned.column("sex").isna().sum() == 1


def test_cleaning_is_idempotent(raw) -> None:
    once = drop_incomplete(raw)
    twice = drop_incomplete(once)
    assert twice.frame().equals(once.frame())


def test_empty_result_is_valid(raw) -> None:
    df = raw.frame()
    df["sex"] = None

    cleaned, outcome = clean_dataset(Dataset.from_frame(df))
    assert len(cleaned) == 0
    assert outcome.rows_dropped == 25
    assert cleaned.columns == raw.columns


def test_unknown_column_is_rejected(raw) -> None:
    with pytest.raises(DatasetError):
        drop_incomplete(raw, ["wingspan"])


def test_outcome_as_dict(raw) -> None:
    _, outcome = clean_dataset(raw)
    d = outcome.as_dict()
    assert d["rows_dropped"] == 2
    assert "body_mass_g" in d["columns"]
