from __future__ import annotations

from pathlib import Path

import pytest

from penguin_report.aggregate import GroupKey, summarize_groups, summary_frame
from penguin_report.clean import drop_incomplete
from penguin_report.dataset import Dataset
from penguin_report.ingest import load_dataset
from penguin_report.models import KEY_COLUMNS, MEASUREMENT_COLUMNS

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture()
def cleaned() -> Dataset:
    return drop_incomplete(load_dataset(FIXTURES / "penguins_small.csv"))


def test_one_row_per_distinct_group(cleaned: Dataset) -> None:
    summaries = summarize_groups(cleaned)

    distinct = cleaned.frame()[list(KEY_COLUMNS)].drop_duplicates()
    assert len(summaries) == len(distinct) == 10
    assert len({s.key for s in summaries}) == len(summaries)


def test_means_match_raw_group_means(cleaned: Dataset) -> None:
    df = cleaned.frame()
    for s in summarize_groups(cleaned):
        k = s.key
        rows = df[(df["species"] == k.species) & (df["island"] == k.island) & (df["sex"] == k.sex)]
        assert s.n == len(rows)
        for col in MEASUREMENT_COLUMNS:
            assert getattr(s, col) == pytest.approx(float(rows[col].mean()), rel=1e-9)


def test_known_group_values(cleaned: Dataset) -> None:
    by_key = {s.key: s for s in summarize_groups(cleaned)}

    torgersen_females = by_key[GroupKey("Adelie", "Torgersen", "female")]
    assert torgersen_females.n == 3
    assert torgersen_females.body_mass_g == pytest.approx((3800 + 3250 + 3450) / 3, rel=1e-12)
    assert torgersen_females.bill_length_mm == pytest.approx((39.5 + 40.3 + 36.7) / 3, rel=1e-12)

    dream_males = by_key[GroupKey("Adelie", "Dream", "male")]
    assert dream_males.n == 1
    assert dream_males.flipper_length_mm == pytest.approx(178.0)


def test_groups_are_emitted_in_sorted_key_order(cleaned: Dataset) -> None:
    keys = [s.key for s in summarize_groups(cleaned)]
    assert keys == sorted(keys)
    assert keys[0] == GroupKey("Adelie", "Biscoe", "female")


def test_row_order_does_not_change_the_summary(cleaned: Dataset) -> None:
    shuffled = Dataset.from_frame(cleaned.frame().sample(frac=1.0, random_state=7))
    assert summarize_groups(shuffled) == summarize_groups(cleaned)


def test_incomplete_rows_do_not_qualify() -> None:
    raw = load_dataset(FIXTURES / "penguins_small.csv")

    # The uncleaned table has one row with no measurements and one without sex.
    assert summarize_groups(raw) == summarize_groups(drop_incomplete(raw))


def test_removing_a_species_removes_its_groups(cleaned: Dataset) -> None:
    df = cleaned.frame()
    without_gentoo = Dataset.from_frame(df[df["species"] != "Gentoo"])

    before = summarize_groups(cleaned)
    after = summarize_groups(without_gentoo)

    assert {s.key for s in before} - {s.key for s in after} == {
        GroupKey("Gentoo", "Biscoe", "female"),
        GroupKey("Gentoo", "Biscoe", "male"),
    }
    assert all(s.key.species != "Gentoo" for s in after)


def test_empty_dataset_has_no_groups(cleaned: Dataset) -> None:
    empty = Dataset.from_frame(cleaned.frame().iloc[0:0])
    assert summarize_groups(empty) == []
    frame = summary_frame([])
    assert list(frame.columns) == list(KEY_COLUMNS) + ["n"] + list(MEASUREMENT_COLUMNS)
    assert frame.empty


def test_summary_frame_layout(cleaned: Dataset) -> None:
    summaries = summarize_groups(cleaned)
    frame = summary_frame(summaries)

    assert list(frame.columns) == list(KEY_COLUMNS) + ["n"] + list(MEASUREMENT_COLUMNS)
    assert len(frame) == len(summaries)
    assert int(frame["n"].sum()) == len(cleaned)
