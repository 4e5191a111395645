from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .dataset import Dataset
from .models import COLUMNS, DatasetError

# Every field is used downstream: the key columns for grouping, the
# measurements for means and the model, year for the report.
REQUIRED_COLUMNS: tuple[str, ...] = COLUMNS


@dataclass(frozen=True)
class CleaningOutcome:
    """Row counts before and after dropping incomplete rows."""

    rows_in: int
    rows_out: int
    columns: tuple[str, ...]

    @property
    def rows_dropped(self) -> int:
        return self.rows_in - self.rows_out

    def as_dict(self) -> dict[str, object]:
        return {
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "rows_dropped": self.rows_dropped,
            "columns": list(self.columns),
        }


def drop_incomplete(dataset: Dataset, columns: Sequence[str] = REQUIRED_COLUMNS) -> Dataset:
    """Return the rows with no missing value in `columns`, in their original order."""
    unknown = [c for c in columns if c not in dataset.columns]
    if unknown:
        raise DatasetError(f"Cannot clean on unknown columns: {unknown}")

    df = dataset.frame()
    keep = df[list(columns)].notna().all(axis=1)
    return Dataset.from_frame(df[keep], source=dataset.source)


def clean_dataset(dataset: Dataset, columns: Sequence[str] = REQUIRED_COLUMNS) -> tuple[Dataset, CleaningOutcome]:
    cleaned = drop_incomplete(dataset, columns)
    outcome = CleaningOutcome(rows_in=len(dataset), rows_out=len(cleaned), columns=tuple(columns))
    return cleaned, outcome
